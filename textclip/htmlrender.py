from __future__ import annotations

from html import escape
from typing import List

from .richtext import RichText, TextAttributes


_DOC_HEAD = (
    "<!DOCTYPE html PUBLIC \"-//W3C//DTD HTML 4.01//EN\" \"http://www.w3.org/TR/html4/strict.dtd\">\n"
    "<html>\n"
    "<head>\n"
    "<meta http-equiv=\"Content-Type\" content=\"text/html; charset=UTF-8\">\n"
    "<meta http-equiv=\"Content-Style-Type\" content=\"text/css\">\n"
    "<title></title>\n"
    "</head>\n"
    "<body>\n"
)
_DOC_TAIL = "</body>\n</html>\n"


def _style(attrs: TextAttributes) -> str:
    rules: List[str] = []
    if attrs.font_family is not None:
        rules.append(f"font-family: '{escape(attrs.font_family)}'")
    if attrs.font_size is not None:
        rules.append(f"font-size: {attrs.font_size:g}px")
    if attrs.bold:
        rules.append("font-weight: bold")
    if attrs.italic:
        rules.append("font-style: italic")
    if attrs.underline:
        rules.append("text-decoration: underline")
    if attrs.color is not None:
        r, g, b = attrs.color
        rules.append(f"color: #{r:02x}{g:02x}{b:02x}")
    return "; ".join(rules)


def _text(text: str) -> str:
    return escape(text, quote=False).replace("\r\n", "\n").replace("\n", "<br>\n")


def render_html(rich: RichText) -> bytes:
    """Render rich text as a UTF-8 HTML document.

    Runs with attributes become ``<span style=...>``; attachments become
    ``<img>`` references to their file name.
    """
    parts: List[str] = [_DOC_HEAD, "<p>"]
    for run in rich.runs:
        if run.attachment is not None:
            parts.append(f"<img src=\"{escape(run.attachment.name)}\" alt=\"{escape(run.attachment.name)}\">")
            continue
        style = _style(run.attributes)
        if style:
            parts.append(f"<span style=\"{style}\">{_text(run.text)}</span>")
        else:
            parts.append(_text(run.text))
    parts.append("</p>\n")
    parts.append(_DOC_TAIL)
    # Lone surrogates are not encodable; the caller treats that as a failed render
    return "".join(parts).encode("utf-8")
