"""Section records produced by the segmenter."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from scratch_engine.buffer import TextRange

_HEADING = re.compile(r"^[\t ]*(#{1,6})[\t ]+(.+?)$")
_BULLET_LIST = re.compile(r"^ *[*+-] +(.+)$")
_ORDERED_LIST = re.compile(r"^ *\d\. +(.+)$")

SectionKey = Tuple[TextRange, str]


class SectionKind(str, Enum):
    HEADING = "heading"
    ORDERED_LIST = "ordered_list"
    BULLET_LIST = "bullet_list"
    TEXT = "text"
    EMPTY = "empty"


@dataclass(frozen=True, slots=True)
class Section:
    """One blank-line separated block of the buffer.

    ``line_range`` is a ``range`` of zero-based line numbers covered by the
    block; ``math_ranges`` are absolute ranges of the TeX spans inside it.
    """

    index: int
    source_range: TextRange
    line_range: range
    content: str
    kind: SectionKind = SectionKind.TEXT
    level: int = 0
    preview: str = ""
    math_ranges: Tuple[TextRange, ...] = ()

    @property
    def key(self) -> SectionKey:
        """Identity of the block's text, independent of its position in the list."""

        return (self.source_range, self.content)

    @property
    def first_line(self) -> int:
        return self.line_range.start

    @property
    def selectable_range(self) -> TextRange:
        return self.source_range


def describe(content: str) -> Tuple[SectionKind, int, str]:
    """Classify a block by its first non-blank line: ``(kind, level, preview)``."""

    first: Optional[str] = next(
        (line.strip() for line in content.splitlines() if line.strip()), None
    )
    if first is None:
        return SectionKind.EMPTY, 0, ""
    heading = _HEADING.match(first)
    if heading:
        return SectionKind.HEADING, len(heading.group(1)), heading.group(2)
    ordered = _ORDERED_LIST.match(first)
    if ordered:
        return SectionKind.ORDERED_LIST, 0, ordered.group(1)
    bullet = _BULLET_LIST.match(first)
    if bullet:
        return SectionKind.BULLET_LIST, 0, bullet.group(1)
    return SectionKind.TEXT, 0, first


__all__ = ["Section", "SectionKey", "SectionKind", "describe"]
