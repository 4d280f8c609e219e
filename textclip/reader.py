from __future__ import annotations

from typing import Any, BinaryIO, Dict, Optional, Tuple

from .constants import DEFAULT_MAX_CLIPPING_SIZE, UTI_DATA_KEY
from .errors import CannotLoad
from .identifiers import IDENTIFIER_TABLE
from .model import TextClipping
from .plist import PLIST_LOAD_ERRORS, loads_tree


def _read_limited(stream: BinaryIO, max_size: int) -> bytes:
    try:
        data = stream.read(max_size + 1)
    except OSError as exc:
        raise CannotLoad(f"Cannot read clipping: {exc}") from exc
    if data is None:
        raise CannotLoad("Clipping stream is not ready for reading")
    if len(data) > max_size:
        raise CannotLoad(f"Clipping exceeds maximum size of {max_size} bytes")
    return bytes(data)


def parse_tree(data: bytes) -> Any:
    """Turn container bytes into the property list tree or fail with CannotLoad."""
    try:
        return loads_tree(data)
    except PLIST_LOAD_ERRORS as exc:
        raise CannotLoad(f"Not a property list: {exc}") from exc


def _uti_data(tree: Any) -> Dict[str, Any]:
    if not isinstance(tree, dict):
        raise CannotLoad(f"Top-level value is {type(tree).__name__}, expected dictionary")
    uti_data = tree.get(UTI_DATA_KEY)
    if uti_data is None:
        raise CannotLoad(f"Missing {UTI_DATA_KEY} dictionary")
    if not isinstance(uti_data, dict):
        raise CannotLoad(f"{UTI_DATA_KEY} is {type(uti_data).__name__}, expected dictionary")
    return uti_data


def decode_tree_with_diagnostics(tree: Any) -> Tuple[TextClipping, Dict[str, str]]:
    """Decode a container tree.

    Returns:
        The clipping and a map of identifier -> reason for every identifier
        that was present but could not be coerced (its slot is left empty).

    Raises:
        CannotLoad: The tree lacks the UTI-Data wrapper dictionary.
    """
    uti_data = _uti_data(tree)
    slots: Dict[str, Any] = {}
    diagnostics: Dict[str, str] = {}
    for entry in IDENTIFIER_TABLE:
        if entry.identifier not in uti_data:
            continue
        result = entry.decode(uti_data[entry.identifier])
        if result.ok:
            slots[entry.slot] = result.value
        else:
            diagnostics[entry.identifier] = result.reason or "unusable value"
    return TextClipping(**slots), diagnostics


def decode_tree(tree: Any) -> TextClipping:
    clipping, _diagnostics = decode_tree_with_diagnostics(tree)
    return clipping


def _decode_bytes(data: bytes, max_size: int) -> Tuple[TextClipping, Dict[str, str]]:
    if len(data) > max_size:
        raise CannotLoad(f"Clipping exceeds maximum size of {max_size} bytes")
    return decode_tree_with_diagnostics(parse_tree(data))


class ClippingReader:
    """Reads one clipping file.

    Usage:
        with ClippingReader("note.textClipping") as reader:
            clipping = reader.read()
            problems = reader.diagnostics
    """

    def __init__(self, path: str, max_size: int = DEFAULT_MAX_CLIPPING_SIZE):
        self.path = path
        self.max_size = max_size
        self.f: Optional[BinaryIO] = None
        self.clipping: Optional[TextClipping] = None
        self.diagnostics: Dict[str, str] = {}

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self.f is not None:
            return
        try:
            self.f = open(self.path, "rb")
        except OSError as exc:
            raise CannotLoad(f"Cannot open clipping {self.path}: {exc}") from exc

    def close(self):
        if self.f is not None:
            self.f.close()
            self.f = None

    def read(self) -> TextClipping:
        if self.f is None:
            raise RuntimeError("Clipping not open")
        data = _read_limited(self.f, self.max_size)
        self.clipping, self.diagnostics = _decode_bytes(data, self.max_size)
        return self.clipping


def loads(data: bytes, *, max_size: int = DEFAULT_MAX_CLIPPING_SIZE) -> TextClipping:
    """Decode a clipping from bytes."""
    clipping, _diagnostics = _decode_bytes(bytes(data), max_size)
    return clipping


def load(stream: BinaryIO, *, max_size: int = DEFAULT_MAX_CLIPPING_SIZE) -> TextClipping:
    """Decode a clipping from a binary stream. The stream is left open."""
    clipping, _diagnostics = _decode_bytes(_read_limited(stream, max_size), max_size)
    return clipping


def read_clipping(path: str, *, max_size: int = DEFAULT_MAX_CLIPPING_SIZE) -> TextClipping:
    """Decode the clipping stored at ``path``."""
    with ClippingReader(path, max_size=max_size) as reader:
        return reader.read()


def loads_with_diagnostics(data: bytes, *, max_size: int = DEFAULT_MAX_CLIPPING_SIZE) -> Tuple[TextClipping, Dict[str, str]]:
    return _decode_bytes(bytes(data), max_size)
