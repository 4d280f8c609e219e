"""
Identifier table for the clipping container.

Each of the six content-type identifiers maps to one slot of TextClipping,
the kind of value it holds on disk, and three coercions:

- decode: on-disk value -> slot value (reading a container)
- encode: rich text source -> slot value (building a clipping from text)
- store:  slot value -> on-disk value (serializing a clipping)

    identifier                 slot                   on disk
    public.utf8-plain-text     plain_text_utf8        string
    public.utf16-plain-text    plain_text_utf16       data (UTF-16LE)
    public.rtf                 rich_text_markup       string holding RTF
    com.apple.flat-rtfd        rich_text_with_media   data (flat RTFD)
    public.html                html_markup            data (UTF-8 HTML)
    com.apple.webarchive       archived_page          data (opaque)

Coercions never raise. A value that cannot be coerced yields an empty
Coercion carrying the reason; the reader and writer leave that slot out.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple

from .constants import (
    KIND_DATA,
    KIND_STRING,
    SLOT_HTML,
    SLOT_RTF,
    SLOT_RTFD,
    SLOT_UTF16,
    SLOT_UTF8,
    SLOT_WEBARCHIVE,
    UTI_FLAT_RTFD,
    UTI_HTML,
    UTI_RTF,
    UTI_UTF16_PLAIN_TEXT,
    UTI_UTF8_PLAIN_TEXT,
    UTI_WEBARCHIVE,
)
from .errors import RTFDError, RTFError
from .htmlrender import render_html
from .richtext import RichText
from .rtf import parse_rtf, render_rtf
from .rtfd import RTFD_TEXT_ENTRY, pack_flat_rtfd, parse_flat_rtfd


@dataclass(frozen=True)
class Coercion:
    value: Any = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def success(value: Any) -> Coercion:
    return Coercion(value=value)


def empty(reason: Optional[str] = None) -> Coercion:
    return Coercion(reason=reason)


def _type_name(value: Any) -> str:
    return type(value).__name__


def _is_data(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray))


# -------- decode rules (on-disk value -> slot value) --------

def _decode_utf8(value: Any) -> Coercion:
    if not isinstance(value, str):
        return empty(f"expected string, got {_type_name(value)}")
    return success(value)


def _decode_utf16(value: Any) -> Coercion:
    if not _is_data(value):
        return empty(f"expected data, got {_type_name(value)}")
    if len(value) % 2:
        return empty("UTF-16 data has odd length")
    try:
        return success(bytes(value).decode("utf-16-le"))
    except UnicodeDecodeError as exc:
        return empty(f"invalid UTF-16: {exc.reason}")


def _decode_rtf(value: Any) -> Coercion:
    if not isinstance(value, str):
        return empty(f"expected string, got {_type_name(value)}")
    try:
        data = value.encode("utf-8")
    except UnicodeEncodeError as exc:
        return empty(f"RTF string is not UTF-8 encodable: {exc.reason}")
    try:
        return success(parse_rtf(data))
    except RTFError as exc:
        return empty(str(exc))


def _decode_rtfd(value: Any) -> Coercion:
    if not _is_data(value):
        return empty(f"expected data, got {_type_name(value)}")
    try:
        return success(parse_flat_rtfd(bytes(value)))
    except RTFDError as exc:
        return empty(str(exc))


def _decode_html(value: Any) -> Coercion:
    if not _is_data(value):
        return empty(f"expected data, got {_type_name(value)}")
    try:
        return success(bytes(value).decode("utf-8"))
    except UnicodeDecodeError as exc:
        return empty(f"invalid UTF-8: {exc.reason}")


def _decode_webarchive(value: Any) -> Coercion:
    if not _is_data(value):
        return empty(f"expected data, got {_type_name(value)}")
    return success(bytes(value))


# -------- store rules (slot value -> on-disk value) --------

def _store_utf8(value: Any) -> Coercion:
    if not isinstance(value, str):
        return empty(f"expected str, got {_type_name(value)}")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        return empty(f"text is not UTF-8 encodable: {exc.reason}")
    return success(value)


def _store_utf16(value: Any) -> Coercion:
    if not isinstance(value, str):
        return empty(f"expected str, got {_type_name(value)}")
    try:
        return success(value.encode("utf-16-le"))
    except UnicodeEncodeError as exc:
        return empty(f"text is not UTF-16 encodable: {exc.reason}")


def _store_rtf(value: Any) -> Coercion:
    if not isinstance(value, RichText):
        return empty(f"expected RichText, got {_type_name(value)}")
    try:
        data = render_rtf(value)
    except RTFError as exc:
        return empty(str(exc))
    # Stored as a string; readers hand the string's UTF-8 bytes back to the parser
    try:
        return success(data.decode("utf-8"))
    except UnicodeDecodeError as exc:
        print(f"Warning: rendered RTF is not valid UTF-8; omitting {UTI_RTF}: {exc.reason}", file=sys.stderr)
        return empty(f"rendered RTF is not valid UTF-8: {exc.reason}")


def _store_rtfd(value: Any) -> Coercion:
    if not isinstance(value, RichText):
        return empty(f"expected RichText, got {_type_name(value)}")
    try:
        body = render_rtf(value)
    except RTFError as exc:
        return empty(str(exc))
    entries = {RTFD_TEXT_ENTRY: body}
    for attachment in value.attachments:
        entries.setdefault(attachment.name, attachment.data)
    return success(pack_flat_rtfd(entries))


def _store_html(value: Any) -> Coercion:
    if not isinstance(value, str):
        return empty(f"expected str, got {_type_name(value)}")
    try:
        return success(value.encode("utf-8"))
    except UnicodeEncodeError as exc:
        return empty(f"HTML is not UTF-8 encodable: {exc.reason}")


def _store_webarchive(value: Any) -> Coercion:
    if not _is_data(value):
        return empty(f"expected bytes, got {_type_name(value)}")
    return success(bytes(value))


# -------- encode rules (rich text source -> slot value) --------

def _encode_utf8(source: RichText) -> Coercion:
    text = source.string
    stored = _store_utf8(text)
    return success(text) if stored.ok else stored


def _encode_utf16(source: RichText) -> Coercion:
    text = source.string
    stored = _store_utf16(text)
    return success(text) if stored.ok else stored


def _encode_rtf(source: RichText) -> Coercion:
    stored = _store_rtf(source)
    return success(source) if stored.ok else stored


def _encode_html(source: RichText) -> Coercion:
    try:
        return success(render_html(source).decode("utf-8"))
    except UnicodeEncodeError as exc:
        return empty(f"HTML is not UTF-8 encodable: {exc.reason}")


def _not_encoded(source: RichText) -> Coercion:
    return empty()


@dataclass(frozen=True)
class IdentifierEntry:
    identifier: str
    slot: str
    kind: str
    decode: Callable[[Any], Coercion]
    store: Callable[[Any], Coercion]
    encode: Callable[[RichText], Coercion]


IDENTIFIER_TABLE: Tuple[IdentifierEntry, ...] = (
    IdentifierEntry(UTI_UTF8_PLAIN_TEXT, SLOT_UTF8, KIND_STRING, _decode_utf8, _store_utf8, _encode_utf8),
    IdentifierEntry(UTI_UTF16_PLAIN_TEXT, SLOT_UTF16, KIND_DATA, _decode_utf16, _store_utf16, _encode_utf16),
    IdentifierEntry(UTI_RTF, SLOT_RTF, KIND_STRING, _decode_rtf, _store_rtf, _encode_rtf),
    IdentifierEntry(UTI_FLAT_RTFD, SLOT_RTFD, KIND_DATA, _decode_rtfd, _store_rtfd, _not_encoded),
    IdentifierEntry(UTI_HTML, SLOT_HTML, KIND_DATA, _decode_html, _store_html, _encode_html),
    IdentifierEntry(UTI_WEBARCHIVE, SLOT_WEBARCHIVE, KIND_DATA, _decode_webarchive, _store_webarchive, _not_encoded),
)

IDENTIFIERS: Tuple[str, ...] = tuple(e.identifier for e in IDENTIFIER_TABLE)
SLOTS: Tuple[str, ...] = tuple(e.slot for e in IDENTIFIER_TABLE)

_BY_IDENTIFIER: Mapping[str, IdentifierEntry] = MappingProxyType({e.identifier: e for e in IDENTIFIER_TABLE})
_BY_SLOT: Mapping[str, IdentifierEntry] = MappingProxyType({e.slot: e for e in IDENTIFIER_TABLE})


def entry_for_identifier(identifier: str) -> Optional[IdentifierEntry]:
    return _BY_IDENTIFIER.get(identifier)


def entry_for_slot(slot: str) -> IdentifierEntry:
    try:
        return _BY_SLOT[slot]
    except KeyError:
        raise ValueError(f"unknown slot: {slot!r}") from None
