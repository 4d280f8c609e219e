"""
RTF collaborator: render RichText to RTF bytes and parse RTF bytes back.

Rendering
- Output is 7-bit ASCII. Code points above 0x7F are written as ``\\uN?``
  over UTF-16 code units (signed 16-bit, so astral characters become a
  surrogate pair of escapes); ``\\uc1`` is in effect so readers that do not
  understand ``\\u`` fall back to ``?``.
- Newlines (LF, CR or CRLF) become one ``\\par``, tabs ``\\tab``.
- Font and colour tables are built from the attributes actually used.
- Attachment runs are written as Cocoa ``NeXTGraphic`` groups.

Parsing
- Text extraction is delegated to striprtf; character formatting is not
  recovered, so parsed RichText carries plain runs plus attachment runs.
- Surrogate pairs produced by ``\\uN`` escapes are recombined; a lone
  surrogate makes the document invalid.
"""

from __future__ import annotations

import codecs
import re
from typing import Dict, List, Optional, Tuple

from striprtf.striprtf import rtf_to_text

from .constants import ATTACHMENT_CHAR
from .errors import RTFError
from .richtext import PLAIN, Attachment, RichText, TextAttributes, TextRun, attachment_run


DEFAULT_FONT = "Helvetica"
DEFAULT_FONT_SIZE = 12.0
DEFAULT_CODEPAGE = 1252

_RTF_MAGIC = b"{\\rtf"
_CODEPAGE_RE = re.compile(r"\\ansicpg(\d+)")
_NEXT_GRAPHIC_RE = re.compile(
    r"\{\{\\NeXTGraphic\s+"
    r"(?P<name>(?:[^\\{}]|\\u-?\d+\??|\\'[0-9a-fA-F]{2}|\\[\\{}])+?)"
    r"(?:\s+\\(?!u-?\d)[a-zA-Z][^}]*)?\s*\}[^{}]*\}"
)
_NAME_ESCAPE_RE = re.compile(r"\\u(-?\d+)\??|\\'([0-9a-fA-F]{2})|\\([\\{}])")


def _escape_char(ch: str) -> str:
    if ch == "\\":
        return "\\\\"
    if ch == "{":
        return "\\{"
    if ch == "}":
        return "\\}"
    if ch == "\n" or ch == "\r":
        return "\\par\n"
    if ch == "\t":
        return "\\tab "
    code = ord(ch)
    if 0x20 <= code < 0x7F:
        return ch
    out = []
    units = ch.encode("utf-16-le")
    for i in range(0, len(units), 2):
        unit = units[i] | (units[i + 1] << 8)
        if unit > 0x7FFF:
            unit -= 0x10000
        out.append(f"\\u{unit}?")
    return "".join(out)


def escape_text(text: str) -> str:
    # CRLF is one paragraph break
    text = text.replace("\r\n", "\n")
    try:
        return "".join(_escape_char(ch) for ch in text)
    except UnicodeEncodeError as exc:
        raise RTFError(f"text is not encodable: {exc}") from exc


class _Tables:
    def __init__(self) -> None:
        self.fonts: List[str] = [DEFAULT_FONT]
        self.colors: List[Tuple[int, int, int]] = []

    def font_index(self, family: Optional[str]) -> int:
        if family is None:
            return 0
        if family not in self.fonts:
            self.fonts.append(family)
        return self.fonts.index(family)

    def color_index(self, color: Optional[Tuple[int, int, int]]) -> int:
        # Index 0 is the implicit "auto" colour
        if color is None:
            return 0
        if color not in self.colors:
            self.colors.append(color)
        return self.colors.index(color) + 1

    def header(self) -> str:
        fonts = "".join(
            f"{{\\f{i}\\fnil {escape_text(name)};}}" for i, name in enumerate(self.fonts)
        )
        colors = "".join(f"\\red{r}\\green{g}\\blue{b};" for r, g, b in self.colors)
        return f"{{\\fonttbl{fonts}}}\n{{\\colortbl;{colors}}}\n"


def _run_controls(attrs: TextAttributes, tables: _Tables) -> str:
    words = []
    if attrs.font_family is not None:
        words.append(f"\\f{tables.font_index(attrs.font_family)}")
    if attrs.font_size is not None:
        words.append(f"\\fs{int(round(attrs.font_size * 2))}")
    if attrs.bold:
        words.append("\\b")
    if attrs.italic:
        words.append("\\i")
    if attrs.underline:
        words.append("\\ul")
    if attrs.color is not None:
        words.append(f"\\cf{tables.color_index(attrs.color)}")
    return "".join(words)


def render_rtf(rich: RichText) -> bytes:
    """Render rich text as an RTF document (ASCII bytes)."""
    tables = _Tables()
    body: List[str] = []
    for run in rich.runs:
        if run.attachment is not None:
            name = escape_text(run.attachment.name)
            body.append(f"{{{{\\NeXTGraphic {name} \\width0 \\height0}}\\'ac}}")
            continue
        controls = _run_controls(run.attributes, tables)
        if controls:
            body.append(f"{{{controls} {escape_text(run.text)}}}")
        else:
            body.append(escape_text(run.text))
    doc = (
        f"{{\\rtf1\\ansi\\ansicpg{DEFAULT_CODEPAGE}\\deff0\\uc1\n"
        + tables.header()
        + f"\\pard\\f0\\fs{int(DEFAULT_FONT_SIZE * 2)} "
        + "".join(body)
        + "}"
    )
    return doc.encode("ascii")


def _source_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("cp1252", errors="replace")


def _unescape_name(raw: str) -> str:
    """Undo RTF escaping in a NeXTGraphic file name."""

    def _one(m: "re.Match[str]") -> str:
        if m.group(1) is not None:
            return chr(int(m.group(1)) % 0x10000)
        if m.group(2) is not None:
            return bytes.fromhex(m.group(2)).decode(f"cp{DEFAULT_CODEPAGE}", errors="replace")
        return m.group(3)

    name = _NAME_ESCAPE_RE.sub(_one, raw.strip())
    return name.encode("utf-16-le", "surrogatepass").decode("utf-16-le", errors="replace")


def _codepage(text: str) -> str:
    m = _CODEPAGE_RE.search(text)
    if m is None:
        return f"cp{DEFAULT_CODEPAGE}"
    name = f"cp{m.group(1)}"
    try:
        codecs.lookup(name)
    except LookupError:
        return f"cp{DEFAULT_CODEPAGE}"
    return name


def parse_rtf(data: bytes, attachments: Optional[Dict[str, bytes]] = None) -> RichText:
    """Parse RTF bytes into RichText.

    Args:
        data: The RTF document.
        attachments: Payloads for NeXTGraphic references, keyed by file name
            (supplied by the RTFD bundle reader).

    Raises:
        RTFError: The bytes are not an RTF document or cannot be decoded.
    """
    if not data.lstrip().startswith(_RTF_MAGIC):
        raise RTFError("not an RTF document")
    source = _source_text(data)
    names: List[str] = []

    def _graphic(m: "re.Match[str]") -> str:
        names.append(_unescape_name(m.group("name")))
        return "{\\uc0\\u65532 }"

    source = _NEXT_GRAPHIC_RE.sub(_graphic, source)
    try:
        extracted = rtf_to_text(source, encoding=_codepage(source), errors="replace")
    except (IndexError, ValueError, TypeError, OverflowError) as exc:
        raise RTFError(f"malformed RTF: {exc}") from exc
    try:
        text = extracted.encode("utf-16-le", "surrogatepass").decode("utf-16-le")
    except UnicodeDecodeError as exc:
        raise RTFError("RTF contains an unpaired surrogate escape") from exc

    if not names:
        return RichText.plain(text)
    payloads = attachments or {}
    runs: List[TextRun] = []
    pending = iter(names)
    for i, piece in enumerate(text.split(ATTACHMENT_CHAR)):
        if i:
            name = next(pending, None)
            if name is None:
                runs.append(TextRun(ATTACHMENT_CHAR, PLAIN))
            else:
                runs.append(attachment_run(Attachment(name, payloads.get(name, b""))))
        runs.append(TextRun(piece))
    return RichText.from_runs(runs)
