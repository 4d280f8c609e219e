from __future__ import annotations

import io
import os
import plistlib
import tempfile
import unittest
from contextlib import redirect_stderr
from unittest import mock

from textclip.constants import FINDER_INFO_XATTR, PLIST_FORMAT_XML
from textclip.errors import SerializationFailure
from textclip.finderinfo import finder_info, tag_clipping_file
from textclip.model import TextClipping
from textclip.reader import loads, read_clipping
from textclip.richtext import Attachment, RichText, TextAttributes, TextRun, attachment_run
from textclip.writer import (
    build_clipping,
    build_rich_clipping_with_diagnostics,
    dumps,
    encode,
    encode_text,
    to_tree,
    write_clipping,
)


class BuildTests(unittest.TestCase):
    def test_plain_text_clipping(self):
        clipping = build_clipping("This is a test")
        self.assertEqual(clipping.plain_text_utf8, "This is a test")
        self.assertEqual(clipping.plain_text_utf16, "This is a test")
        self.assertEqual(clipping.rich_text_markup.string, "This is a test")
        self.assertIn("This is a test", clipping.html_markup)
        self.assertIsNone(clipping.rich_text_with_media)
        self.assertIsNone(clipping.archived_page)

    def test_tree_layout(self):
        tree = to_tree(build_clipping("This is a test"))
        self.assertEqual(list(tree), ["UTI-Data"])
        uti = tree["UTI-Data"]
        self.assertEqual(
            sorted(uti),
            ["public.html", "public.rtf", "public.utf16-plain-text", "public.utf8-plain-text"],
        )
        self.assertEqual(uti["public.utf8-plain-text"], "This is a test")
        self.assertEqual(uti["public.utf16-plain-text"], "This is a test".encode("utf-16-le"))
        self.assertIsInstance(uti["public.rtf"], str)
        self.assertTrue(uti["public.rtf"].startswith("{\\rtf1"))
        self.assertIsInstance(uti["public.html"], bytes)

    def test_absent_slots_omitted(self):
        tree = to_tree(TextClipping(plain_text_utf8="only"))
        self.assertEqual(tree, {"UTI-Data": {"public.utf8-plain-text": "only"}})
        self.assertEqual(to_tree(TextClipping()), {"UTI-Data": {}})

    def test_html_failure_keeps_other_slots(self):
        err = UnicodeEncodeError("utf-8", "x", 0, 1, "surrogates not allowed")
        with mock.patch("textclip.identifiers.render_html", side_effect=err):
            clipping, diagnostics = build_rich_clipping_with_diagnostics(RichText.plain("abc"))
        self.assertIsNone(clipping.html_markup)
        self.assertEqual(clipping.plain_text_utf8, "abc")
        self.assertEqual(clipping.rich_text_markup.string, "abc")
        self.assertIn("public.html", diagnostics)

    def test_unencodable_text_gives_empty_clipping(self):
        clipping, diagnostics = build_rich_clipping_with_diagnostics(RichText.plain("\ud83e"))
        self.assertTrue(clipping.is_empty)
        self.assertEqual(len(diagnostics), 4)
        self.assertEqual(loads(dumps(clipping)), TextClipping())


class RoundTripTests(unittest.TestCase):
    def test_plain_text(self):
        for text in (
            "This is a test",
            "",
            "line one\nline two\r\n\ttabbed",
            "{\\rtf1 looks like RTF}",
            "\"ABCD\U0001F976\U0001FAE5\"",
            "Ünïcödé ✓ 漢字",
        ):
            with self.subTest(text=text):
                clipping = loads(encode_text(text))
                self.assertEqual(clipping.plain_text_utf8, text)
                self.assertEqual(clipping.plain_text_utf16, text)
                self.assertEqual(clipping.rich_text_markup.string, text.replace("\r\n", "\n"))
                self.assertIsNotNone(clipping.html_markup)

    def test_rtf_plain_projection(self):
        text = "\"ABCD\U0001F976\U0001FAE5\" {x}\\y"
        self.assertEqual(loads(encode_text(text)).rich_text_markup.string, text)

    def test_reencode_is_stable(self):
        first = encode_text("This is a test")
        self.assertEqual(dumps(loads(first)), first)

    def test_xml_format(self):
        data = encode_text("This is a test", fmt=PLIST_FORMAT_XML)
        self.assertTrue(data.startswith(b"<?xml"))
        self.assertIn(b"<key>UTI-Data</key>", data)
        self.assertEqual(loads(data).plain_text_utf8, "This is a test")

    def test_rich_source(self):
        rich = RichText.from_runs([TextRun("Hello "), TextRun("World", TextAttributes(bold=True))])
        clipping = loads(encode(rich))
        self.assertEqual(clipping.plain_text_utf8, "Hello World")
        self.assertEqual(clipping.rich_text_markup.string, "Hello World")
        self.assertIn("font-weight: bold", clipping.html_markup)

    def test_media_slots_round_trip(self):
        png = b"\x89PNG\r\n\x1a\nfake"
        rich = RichText.from_runs([TextRun("logo "), attachment_run(Attachment("logo.png", png))])
        clipping = TextClipping(
            plain_text_utf8=rich.string,
            rich_text_with_media=rich,
            archived_page=b"opaque",
        )
        back = loads(dumps(clipping))
        self.assertEqual(back.rich_text_with_media.string, rich.string)
        self.assertEqual(back.rich_text_with_media.attachments, (Attachment("logo.png", png),))
        self.assertEqual(back.archived_page, b"opaque")

    def test_non_ascii_attachment_name(self):
        rich = RichText.from_runs([TextRun("x "), attachment_run(Attachment("图.png", b"PNG"))])
        back = loads(dumps(TextClipping(rich_text_with_media=rich)))
        self.assertEqual(back.rich_text_with_media.string, "x \ufffc")
        self.assertEqual(back.rich_text_with_media.attachments, (Attachment("图.png", b"PNG"),))

    def test_serializer_rejection(self):
        with mock.patch("textclip.writer.dump_tree", side_effect=TypeError("unsupported type")):
            with self.assertRaises(SerializationFailure):
                dumps(build_clipping("x"))


class WriteFileTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = os.path.join(self.tmp.name, "note.textClipping")

    def test_write_plain_text_tags_file(self):
        with mock.patch("textclip.writer.tag_clipping_file") as tag:
            written = write_clipping(self.path, "This is a test")
        tag.assert_called_once_with(self.path)
        self.assertEqual(written, os.path.getsize(self.path))
        self.assertEqual(read_clipping(self.path).plain_text_utf8, "This is a test")
        self.assertEqual(os.listdir(self.tmp.name), ["note.textClipping"])

    def test_rich_and_prebuilt_sources_not_tagged(self):
        with mock.patch("textclip.writer.tag_clipping_file") as tag:
            write_clipping(self.path, RichText.plain("rich"))
            write_clipping(self.path, build_clipping("built"))
            write_clipping(self.path, "untagged", tag=False)
        tag.assert_not_called()
        self.assertEqual(read_clipping(self.path).plain_text_utf8, "untagged")

    def test_replaces_existing_file(self):
        with open(self.path, "wb") as f:
            f.write(b"old contents")
        write_clipping(self.path, "new", tag=False)
        self.assertEqual(read_clipping(self.path).plain_text_utf8, "new")

    def test_written_file_is_plist(self):
        write_clipping(self.path, "abc", tag=False)
        with open(self.path, "rb") as f:
            tree = plistlib.load(f)
        self.assertEqual(tree["UTI-Data"]["public.utf8-plain-text"], "abc")


class FinderInfoTests(unittest.TestCase):
    def test_record_layout(self):
        info = finder_info()
        self.assertEqual(len(info), 32)
        self.assertEqual(info[:8], b"clptMACS")
        self.assertEqual(info[8:], b"\x00" * 24)
        with self.assertRaises(ValueError):
            finder_info(b"txt", b"MACS")

    def test_tag_sets_attribute(self):
        with mock.patch("os.setxattr", create=True) as setxattr:
            self.assertTrue(tag_clipping_file("/tmp/x.textClipping"))
        setxattr.assert_called_once_with("/tmp/x.textClipping", FINDER_INFO_XATTR, finder_info())

    def test_tag_failure_is_a_warning(self):
        buf = io.StringIO()
        with mock.patch("os.setxattr", create=True, side_effect=OSError(95, "Operation not supported")):
            with redirect_stderr(buf):
                self.assertFalse(tag_clipping_file("/tmp/x.textClipping"))
        self.assertIn("Warning", buf.getvalue())


if __name__ == "__main__":
    unittest.main()
