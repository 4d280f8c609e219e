"""
textclip: reader/writer for .textClipping containers.

A clipping carries one snippet of text in up to six representations so the
receiving application can pick the one it understands:

- UTF-8 and UTF-16 plain text.
- RTF (stored as a string) and flat RTFD (RTF plus embedded media).
- HTML and an opaque web archive blob.

The container itself is a property list with a single ``UTI-Data``
dictionary keyed by content-type identifier. Reading is best-effort per
representation: a representation that cannot be decoded is simply absent,
while a container that is not a property list or lacks ``UTI-Data`` fails
with CannotLoad. Writing always attempts both plain-text forms and adds RTF
and HTML when they render.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "identifiers",
    "model",
    "reader",
    "writer",
    "richtext",
    "errors",
]

# Importable programmatic API is available via textclip.reader/textclip.writer and
# the CLI functions in textclip.cli (cmd_info/cmd_extract/cmd_create) which take normal parameters.
