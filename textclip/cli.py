from __future__ import annotations

import sys
import argparse
import json as _json

from typing import Any, Dict, List, Optional

from textclip.constants import (
    FILE_EXTENSION,
    PLIST_FORMAT_BINARY,
    PLIST_FORMAT_XML,
    SLOT_HTML,
    SLOT_RTF,
    SLOT_RTFD,
    SLOT_UTF16,
    SLOT_UTF8,
    SLOT_WEBARCHIVE,
    UT_TYPE,
)
from textclip.errors import TextClipError
from textclip.identifiers import entry_for_slot
from textclip.reader import ClippingReader
from textclip.richtext import RichText
from textclip.writer import write_clipping


# Short names accepted on the command line
SLOT_NAMES: Dict[str, str] = {
    "utf8": SLOT_UTF8,
    "utf16": SLOT_UTF16,
    "rtf": SLOT_RTF,
    "rtfd": SLOT_RTFD,
    "html": SLOT_HTML,
    "webarchive": SLOT_WEBARCHIVE,
}


def _slot_size(value: Any) -> int:
    """Size of a slot value: bytes for blobs, characters for text."""
    if isinstance(value, RichText):
        return len(value.string)
    return len(value)


def cmd_info(path: str, *, as_json: bool = False) -> bool:
    """Show which representations a clipping holds.

    Args:
        path: Path to a .textClipping file.
        as_json: Emit a JSON object instead of text lines.
    """
    with ClippingReader(path) as r:
        clipping = r.read()
        diagnostics = r.diagnostics
    slots: Dict[str, Dict[str, Any]] = {}
    for name, slot in SLOT_NAMES.items():
        value = clipping.get(slot)
        if value is None:
            continue
        slots[name] = {"identifier": entry_for_slot(slot).identifier, "size": _slot_size(value)}
        if isinstance(value, RichText):
            slots[name]["attachments"] = len(value.attachments)
    if as_json:
        print(_json.dumps({"path": path, "slots": slots, "unreadable": diagnostics}))
        return True
    print(f"Clipping: {path}")
    if not slots:
        print("  (no usable representations)")
    for name, info in slots.items():
        line = f"  {name:<11} {info['identifier']:<24} {info['size']}"
        if info.get("attachments"):
            line += f" ({info['attachments']} attachment(s))"
        print(line)
    for identifier, reason in diagnostics.items():
        print(f"Warning: {identifier} present but unreadable: {reason}", file=sys.stderr)
    return True


def cmd_extract(path: str, *, slot: str = "utf8", output: Optional[str] = None) -> bool:
    """Write one representation to stdout or a file.

    Rich-text representations are written as their plain text. The web
    archive is binary and needs ``output``.

    Returns:
        False when the clipping does not hold the requested representation.
    """
    if slot not in SLOT_NAMES:
        raise ValueError(f"unknown slot {slot!r}; choose from {', '.join(SLOT_NAMES)}")
    with ClippingReader(path) as r:
        value = r.read().get(SLOT_NAMES[slot])
    if value is None:
        print(f"Error: {path} has no usable {slot} representation", file=sys.stderr)
        return False
    if isinstance(value, RichText):
        value = value.string
    if isinstance(value, bytes):
        if output is None:
            raise ValueError(f"{slot} is binary; pass --output")
        with open(output, "wb") as f:
            f.write(value)
        return True
    if output is None:
        sys.stdout.write(value)
        sys.stdout.flush()
    else:
        with open(output, "w", encoding="utf-8", newline="") as f:
            f.write(value)
    return True


def cmd_create(
    output: str,
    *,
    text: Optional[str] = None,
    input_path: Optional[str] = None,
    tag: bool = True,
    xml: bool = False,
    quiet: bool = False,
) -> int:
    """Create a clipping from plain text.

    Args:
        output: Destination path; the .textClipping extension is added when missing.
        text: Text to store. Takes precedence over ``input_path``.
        input_path: UTF-8 text file to read when ``text`` is not given;
            stdin is read when neither is given.
        tag: Set the clipping file type on the written file.
        xml: Write an XML property list instead of a binary one.
    """
    if text is None:
        if input_path is not None:
            with open(input_path, "r", encoding="utf-8", newline="") as f:
                text = f.read()
        else:
            text = sys.stdin.read()
    if not output.lower().endswith("." + FILE_EXTENSION.lower()):
        output = f"{output}.{FILE_EXTENSION}"
    written = write_clipping(
        output,
        text,
        fmt=PLIST_FORMAT_XML if xml else PLIST_FORMAT_BINARY,
        tag=tag,
    )
    if not quiet:
        print(f"Wrote {written} bytes to {output}")
    return written


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="textclip",
        description="Read and write .textClipping files",
        epilog=f"Clippings are identified by the type {UT_TYPE}.",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_info = sub.add_parser("info", help="Show the representations stored in a clipping")
    ap_info.add_argument("clipping", help="Clipping path")
    ap_info.add_argument("--json", action="store_true", help="Emit JSON")

    ap_extract = sub.add_parser("extract", help="Print or save one representation")
    ap_extract.add_argument("clipping", help="Clipping path")
    ap_extract.add_argument("--slot", choices=list(SLOT_NAMES), default="utf8", help="Representation (default: utf8)")
    ap_extract.add_argument("--output", help="Write to this file instead of stdout")

    ap_create = sub.add_parser("create", help="Create a clipping from plain text")
    ap_create.add_argument("output", help="Output .textClipping path")
    src = ap_create.add_mutually_exclusive_group()
    src.add_argument("--text", help="Text to store")
    src.add_argument("--input", help="UTF-8 text file to store (default: stdin)")
    ap_create.add_argument("--no-tag", action="store_true", help="Do not set the clipping file type")
    ap_create.add_argument("--xml", action="store_true", help="Write an XML property list")
    ap_create.add_argument("--quiet", help="limit outputs to errors only", action="store_true")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "info":
            cmd_info(args.clipping, as_json=args.json)
        elif args.cmd == "extract":
            if not cmd_extract(args.clipping, slot=args.slot, output=args.output):
                sys.exit(1)
        elif args.cmd == "create":
            cmd_create(
                args.output,
                text=args.text,
                input_path=args.input,
                tag=not args.no_tag,
                xml=args.xml,
                quiet=args.quiet,
            )
        else:
            raise RuntimeError("Unknown command")
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (TextClipError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
