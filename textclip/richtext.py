"""
Rich text model shared by the RTF, HTML and flat RTFD collaborators.

A RichText is an immutable sequence of runs. Each run carries its text and
one set of character attributes; attachment runs (embedded images from an
RTFD bundle) hold a single attachment character and the attachment payload.
The container codec only ever needs the plain-text projection (``string``)
and the ability to hand a RichText to a renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .constants import ATTACHMENT_CHAR


@dataclass(frozen=True)
class TextAttributes:
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    color: Optional[Tuple[int, int, int]] = None  # 0-255 per component

    @property
    def is_plain(self) -> bool:
        return self == PLAIN


PLAIN = TextAttributes()


@dataclass(frozen=True)
class Attachment:
    name: str
    data: bytes = b""


@dataclass(frozen=True)
class TextRun:
    text: str
    attributes: TextAttributes = PLAIN
    attachment: Optional[Attachment] = None


@dataclass(frozen=True)
class RichText:
    runs: Tuple[TextRun, ...] = field(default_factory=tuple)

    @classmethod
    def plain(cls, text: str) -> "RichText":
        """Wrap plain text in a single unformatted run."""
        if not text:
            return cls()
        return cls((TextRun(text),))

    @classmethod
    def from_runs(cls, runs: Iterable[TextRun]) -> "RichText":
        """Build from runs, dropping empty text and merging equal neighbours."""
        merged: List[TextRun] = []
        for run in runs:
            if not run.text:
                continue
            if merged and run.attachment is None and merged[-1].attachment is None \
                    and merged[-1].attributes == run.attributes:
                merged[-1] = TextRun(merged[-1].text + run.text, run.attributes)
            else:
                merged.append(run)
        return cls(tuple(merged))

    @property
    def string(self) -> str:
        return "".join(run.text for run in self.runs)

    @property
    def attachments(self) -> Tuple[Attachment, ...]:
        return tuple(run.attachment for run in self.runs if run.attachment is not None)

    def attributed(self) -> bool:
        """True when any run carries formatting or an attachment."""
        return any(not run.attributes.is_plain or run.attachment is not None for run in self.runs)

    def __len__(self) -> int:
        return len(self.string)


def attachment_run(attachment: Attachment, attributes: TextAttributes = PLAIN) -> TextRun:
    return TextRun(ATTACHMENT_CHAR, attributes, attachment)
