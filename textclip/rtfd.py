"""
Flat RTFD bundle reader/writer.

A flat RTFD is a directory wrapper (``TXT.rtf`` plus attachment files)
serialized into one blob. Layout (all integers u32 little endian):

    magic[4] = b"rtfd"
    version  = 0
    count
    name_len[count]
    names (concatenated UTF-8, no terminators)
    data_len[count]
    data (concatenated)

The RTF body lives in the ``TXT.rtf`` entry; every other entry is an
attachment referenced from the RTF by file name. Entries named ``.`` are
directory markers and are ignored.
"""

from __future__ import annotations

import struct
from typing import Dict, List, Mapping, Tuple

from .errors import RTFDError, RTFError
from .richtext import RichText
from .rtf import parse_rtf


RTFD_MAGIC = b"rtfd"
RTFD_VERSION = 0
RTFD_TEXT_ENTRY = "TXT.rtf"

_HDR_STRUCT = struct.Struct("<4sII")
_U32 = struct.Struct("<I")

MAX_RTFD_ENTRIES = 4096


def _read_u32s(blob: bytes, pos: int, count: int) -> Tuple[List[int], int]:
    end = pos + 4 * count
    if end > len(blob):
        raise RTFDError("Flat RTFD truncated in length table")
    values = list(struct.unpack_from(f"<{count}I", blob, pos))
    return values, end


def unpack_flat_rtfd(blob: bytes) -> Dict[str, bytes]:
    """Split a flat RTFD blob into its named entries."""
    if len(blob) < _HDR_STRUCT.size:
        raise RTFDError("Flat RTFD too short")
    magic, version, count = _HDR_STRUCT.unpack_from(blob, 0)
    if magic != RTFD_MAGIC:
        raise RTFDError("Bad flat RTFD magic")
    if version != RTFD_VERSION:
        raise RTFDError(f"Unsupported flat RTFD version: {version}")
    if count > MAX_RTFD_ENTRIES:
        raise RTFDError("Flat RTFD exceeds max entries limit")
    pos = _HDR_STRUCT.size
    name_lens, pos = _read_u32s(blob, pos, count)
    names: List[str] = []
    for ln in name_lens:
        if pos + ln > len(blob):
            raise RTFDError("Flat RTFD truncated in names")
        try:
            names.append(blob[pos : pos + ln].decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise RTFDError("Flat RTFD entry name is not UTF-8") from exc
        pos += ln
    data_lens, pos = _read_u32s(blob, pos, count)
    entries: Dict[str, bytes] = {}
    for name, ln in zip(names, data_lens):
        if pos + ln > len(blob):
            raise RTFDError("Flat RTFD truncated in data")
        if name != ".":
            entries[name] = blob[pos : pos + ln]
        pos += ln
    return entries


def pack_flat_rtfd(entries: Mapping[str, bytes]) -> bytes:
    """Serialize named entries into a flat RTFD blob (insertion order)."""
    names = [name.encode("utf-8") for name in entries]
    payloads = [bytes(data) for data in entries.values()]
    out = bytearray(_HDR_STRUCT.pack(RTFD_MAGIC, RTFD_VERSION, len(names)))
    for name in names:
        out += _U32.pack(len(name))
    for name in names:
        out += name
    for data in payloads:
        out += _U32.pack(len(data))
    for data in payloads:
        out += data
    return bytes(out)


def parse_flat_rtfd(blob: bytes) -> RichText:
    entries = unpack_flat_rtfd(blob)
    body = entries.pop(RTFD_TEXT_ENTRY, None)
    if body is None:
        raise RTFDError(f"Flat RTFD has no {RTFD_TEXT_ENTRY} entry")
    try:
        return parse_rtf(body, attachments=entries)
    except RTFError as exc:
        raise RTFDError(f"Flat RTFD text is not RTF: {exc}") from exc
