from __future__ import annotations

import os
import tempfile
from typing import Any, Dict, Tuple, Union

from .constants import DEFAULT_PLIST_FORMAT, UTI_DATA_KEY
from .errors import SerializationFailure
from .finderinfo import tag_clipping_file
from .identifiers import IDENTIFIER_TABLE
from .model import TextClipping
from .plist import PLIST_DUMP_ERRORS, dump_tree
from .richtext import RichText


Source = Union[str, RichText]


def build_rich_clipping_with_diagnostics(rich: RichText) -> Tuple[TextClipping, Dict[str, str]]:
    """Build a clipping from rich text, one slot at a time.

    Plain-text slots come from the rich text's plain-text projection; markup
    slots are rendered from the rich text itself. A slot whose rendering
    fails is left out and its reason reported; other slots are unaffected.
    """
    slots: Dict[str, Any] = {}
    diagnostics: Dict[str, str] = {}
    for entry in IDENTIFIER_TABLE:
        result = entry.encode(rich)
        if result.ok:
            slots[entry.slot] = result.value
        elif result.reason:
            diagnostics[entry.identifier] = result.reason
    return TextClipping(**slots), diagnostics


def build_rich_clipping(rich: RichText) -> TextClipping:
    clipping, _diagnostics = build_rich_clipping_with_diagnostics(rich)
    return clipping


def build_clipping(text: str) -> TextClipping:
    """Build a clipping from plain text (rendered as one unformatted run)."""
    return build_rich_clipping(RichText.plain(text))


def to_tree(clipping: TextClipping) -> Dict[str, Dict[str, Any]]:
    """Assemble the two-level container tree; absent slots are omitted."""
    uti_data: Dict[str, Any] = {}
    for entry in IDENTIFIER_TABLE:
        value = getattr(clipping, entry.slot)
        if value is None:
            continue
        stored = entry.store(value)
        if stored.ok:
            uti_data[entry.identifier] = stored.value
    return {UTI_DATA_KEY: uti_data}


def dumps(clipping: TextClipping, *, fmt: str = DEFAULT_PLIST_FORMAT) -> bytes:
    """Serialize a clipping to container bytes.

    Raises:
        SerializationFailure: The property list serializer rejected the tree.
    """
    tree = to_tree(clipping)
    try:
        return dump_tree(tree, fmt)
    except PLIST_DUMP_ERRORS as exc:
        raise SerializationFailure(f"Cannot serialize clipping: {exc}") from exc


def encode_text(text: str, *, fmt: str = DEFAULT_PLIST_FORMAT) -> bytes:
    return dumps(build_clipping(text), fmt=fmt)


def encode_rich_text(rich: RichText, *, fmt: str = DEFAULT_PLIST_FORMAT) -> bytes:
    return dumps(build_rich_clipping(rich), fmt=fmt)


def encode(source: Source, *, fmt: str = DEFAULT_PLIST_FORMAT) -> bytes:
    if isinstance(source, RichText):
        return encode_rich_text(source, fmt=fmt)
    return encode_text(source, fmt=fmt)


def _atomic_write(path: str, data: bytes, mode: int = 0o644) -> int:
    dir_name = os.path.dirname(os.path.abspath(path)) or "."
    fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=".textClipping.tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    return len(data)


def write_clipping(
    path: str,
    source: Union[Source, TextClipping],
    *,
    fmt: str = DEFAULT_PLIST_FORMAT,
    tag: bool = True,
) -> int:
    """Encode ``source`` and write it to ``path`` atomically.

    Plain-text sources are additionally tagged with the clipping file type
    after a successful write (best-effort, never raises).

    Returns:
        Number of bytes written.
    """
    if isinstance(source, TextClipping):
        data = dumps(source, fmt=fmt)
    else:
        data = encode(source, fmt=fmt)
    written = _atomic_write(path, data)
    if tag and isinstance(source, str):
        tag_clipping_file(path)
    return written
