from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .identifiers import SLOTS
from .richtext import RichText


@dataclass(frozen=True)
class TextClipping:
    """One clipping: up to six representations of the same snippet.

    Every slot is optional. ``None`` means the container had no usable value
    for that representation, which is not an error.
    """

    plain_text_utf8: Optional[str] = None
    plain_text_utf16: Optional[str] = None
    rich_text_markup: Optional[RichText] = None
    rich_text_with_media: Optional[RichText] = None
    html_markup: Optional[str] = None
    archived_page: Optional[bytes] = None

    def get(self, slot: str) -> Any:
        if slot not in SLOTS:
            raise ValueError(f"unknown slot: {slot!r}")
        return getattr(self, slot)

    def has(self, slot: str) -> bool:
        return self.get(slot) is not None

    def present_slots(self) -> Tuple[str, ...]:
        return tuple(slot for slot in SLOTS if getattr(self, slot) is not None)

    @property
    def is_empty(self) -> bool:
        return not self.present_slots()

    @property
    def text(self) -> Optional[str]:
        """Best available plain text, preferring the UTF-8 representation."""
        for value in (self.plain_text_utf8, self.plain_text_utf16):
            if value is not None:
                return value
        for rich in (self.rich_text_markup, self.rich_text_with_media):
            if rich is not None:
                return rich.string
        return None
