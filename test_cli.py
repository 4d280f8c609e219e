from __future__ import annotations

import io
import json
import os
import plistlib
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from textclip.cli import cmd_create, cmd_extract, cmd_info, main
from textclip.reader import read_clipping


class CLIWorkflowTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.d = self.tmp.name

    def _create(self, text: str, name: str = "note") -> str:
        out = os.path.join(self.d, name)
        cmd_create(out, text=text, tag=False, quiet=True)
        return out + ".textClipping"

    def test_create_appends_extension(self):
        path = self._create("This is a test")
        self.assertTrue(os.path.exists(path))
        self.assertEqual(read_clipping(path).plain_text_utf8, "This is a test")

    def test_create_keeps_extension_and_reports(self):
        out = os.path.join(self.d, "kept.textClipping")
        buf = io.StringIO()
        with redirect_stdout(buf):
            written = cmd_create(out, text="hi", tag=False)
        self.assertEqual(written, os.path.getsize(out))
        self.assertIn(f"Wrote {written} bytes to {out}", buf.getvalue())

    def test_create_extension_case_insensitive(self):
        out = os.path.join(self.d, "lower.textclipping")
        cmd_create(out, text="hi", tag=False, quiet=True)
        self.assertEqual(os.listdir(self.d), ["lower.textclipping"])

    def test_create_from_input_file(self):
        src = os.path.join(self.d, "in.txt")
        with open(src, "w", encoding="utf-8", newline="") as f:
            f.write("from a file\r\nsecond line")
        out = os.path.join(self.d, "fromfile")
        cmd_create(out, input_path=src, tag=False, quiet=True)
        self.assertEqual(read_clipping(out + ".textClipping").plain_text_utf8, "from a file\r\nsecond line")

    def test_create_from_stdin(self):
        out = os.path.join(self.d, "stdin")
        with mock.patch("sys.stdin", io.StringIO("piped text")):
            cmd_create(out, tag=False, quiet=True)
        self.assertEqual(read_clipping(out + ".textClipping").plain_text_utf8, "piped text")

    def test_create_xml(self):
        out = os.path.join(self.d, "x")
        cmd_create(out, text="xml please", tag=False, xml=True, quiet=True)
        with open(out + ".textClipping", "rb") as f:
            self.assertTrue(f.read().startswith(b"<?xml"))

    def test_info_json(self):
        path = self._create("\"ABCD\U0001F976\U0001FAE5\"")
        buf = io.StringIO()
        with redirect_stdout(buf):
            cmd_info(path, as_json=True)
        report = json.loads(buf.getvalue())
        self.assertEqual(sorted(report["slots"]), ["html", "rtf", "utf16", "utf8"])
        self.assertEqual(report["slots"]["utf8"]["identifier"], "public.utf8-plain-text")
        self.assertEqual(report["slots"]["utf8"]["size"], 8)
        self.assertEqual(report["unreadable"], {})

    def test_info_reports_unreadable(self):
        path = os.path.join(self.d, "odd.textClipping")
        with open(path, "wb") as f:
            f.write(plistlib.dumps({"UTI-Data": {"public.utf16-plain-text": b"\x00"}}))
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            cmd_info(path)
        self.assertIn("(no usable representations)", out.getvalue())
        self.assertIn("Warning: public.utf16-plain-text", err.getvalue())

    def test_extract_text_and_rtf(self):
        path = self._create("two\nlines")
        buf = io.StringIO()
        with redirect_stdout(buf):
            self.assertTrue(cmd_extract(path))
        self.assertEqual(buf.getvalue(), "two\nlines")

        target = os.path.join(self.d, "rtf.txt")
        self.assertTrue(cmd_extract(path, slot="rtf", output=target))
        with open(target, "r", encoding="utf-8", newline="") as f:
            self.assertEqual(f.read(), "two\nlines")

    def test_extract_missing_slot(self):
        path = self._create("abc")
        err = io.StringIO()
        with redirect_stderr(err):
            self.assertFalse(cmd_extract(path, slot="webarchive"))
        self.assertIn("Error:", err.getvalue())

    def test_extract_unknown_slot(self):
        with self.assertRaises(ValueError):
            cmd_extract(self._create("abc"), slot="pdf")


class MainTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def test_create_then_extract(self):
        out = os.path.join(self.tmp.name, "m")
        main(["create", out, "--text", "via main", "--no-tag", "--quiet"])
        buf = io.StringIO()
        with redirect_stdout(buf):
            main(["extract", out + ".textClipping"])
        self.assertEqual(buf.getvalue(), "via main")

    def test_not_a_clipping_exits_2(self):
        path = os.path.join(self.tmp.name, "junk.textClipping")
        with open(path, "wb") as f:
            f.write(b"not a property list")
        err = io.StringIO()
        with redirect_stderr(err), self.assertRaises(SystemExit) as cm:
            main(["info", path])
        self.assertEqual(cm.exception.code, 2)
        self.assertIn("Error:", err.getvalue())

    def test_missing_file_exits_2(self):
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as cm:
            main(["info", os.path.join(self.tmp.name, "absent.textClipping")])
        self.assertEqual(cm.exception.code, 2)

    def test_missing_slot_exits_1(self):
        out = os.path.join(self.tmp.name, "s")
        main(["create", out, "--text", "x", "--no-tag", "--quiet"])
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as cm:
            main(["extract", out + ".textClipping", "--slot", "rtfd"])
        self.assertEqual(cm.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
