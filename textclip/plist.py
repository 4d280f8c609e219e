from __future__ import annotations

import plistlib
import struct
from typing import Any, Dict
from xml.parsers.expat import ExpatError

from .constants import PLIST_FORMAT_BINARY, PLIST_FORMAT_XML


_FORMATS = {
    PLIST_FORMAT_BINARY: plistlib.FMT_BINARY,
    PLIST_FORMAT_XML: plistlib.FMT_XML,
}

# Everything plistlib is known to raise on malformed input
PLIST_LOAD_ERRORS = (
    plistlib.InvalidFileException,
    ExpatError,
    ValueError,
    TypeError,
    KeyError,
    IndexError,
    OverflowError,
    RecursionError,
    struct.error,
)

PLIST_DUMP_ERRORS = (TypeError, ValueError, OverflowError)


def plist_format(name: str) -> plistlib.PlistFormat:
    try:
        return _FORMATS[name]
    except KeyError:
        raise ValueError(f"unknown plist format: {name!r} (expected one of {sorted(_FORMATS)})") from None


def loads_tree(data: bytes) -> Any:
    """Parse a property list (binary or XML, auto-detected)."""
    return plistlib.loads(data)


def dump_tree(tree: Dict[str, Any], fmt: str = PLIST_FORMAT_BINARY) -> bytes:
    return plistlib.dumps(tree, fmt=plist_format(fmt), sort_keys=True)
