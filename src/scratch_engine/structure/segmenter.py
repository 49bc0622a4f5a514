"""Splits buffer text into blank-line separated sections."""

from __future__ import annotations

from typing import List

from scratch_engine.buffer import TextRange
from scratch_engine.config import DEFAULT_SEPARATOR
from scratch_engine.runtime import telemetry

from .section import Section, describe
from .tex import math_ranges

SYNTHETIC_BREAK = "\n"


class SectionSegmenter:
    """Pure text -> sections function with a configurable separator."""

    def __init__(self, separator: str = DEFAULT_SEPARATOR) -> None:
        if not separator:
            raise ValueError("separator cannot be empty")
        self.separator = separator
        # Lines between two sections that belong to neither of them.
        self._skipped_lines = max(separator.count("\n") - 1, 0)

    def segment(self, text: str) -> List[Section]:
        with telemetry.span("structure::segment", metadata={"length": len(text)}) as span:
            body = text[: -len(SYNTHETIC_BREAK)] if text.endswith(SYNTHETIC_BREAK) else text
            sections: List[Section] = []
            offset = 0
            first_line = 0
            for index, content in enumerate(body.split(self.separator)):
                line_count = content.count("\n") + 1
                source_range = TextRange(offset, len(content))
                kind, level, preview = describe(content)
                sections.append(
                    Section(
                        index=index,
                        source_range=source_range,
                        line_range=range(first_line, first_line + line_count),
                        content=content,
                        kind=kind,
                        level=level,
                        preview=preview,
                        math_ranges=tuple(math_ranges(content, offset)),
                    )
                )
                offset += len(content) + len(self.separator)
                first_line += line_count + self._skipped_lines
            span.add_metadata("sections", len(sections))
        return sections


def segment(text: str, separator: str = DEFAULT_SEPARATOR) -> List[Section]:
    return SectionSegmenter(separator).segment(text)


def covered_length(sections: List[Section], separator: str = DEFAULT_SEPARATOR) -> int:
    """Characters accounted for by ``sections`` and the separators between them."""

    if not sections:
        return 0
    return sum(section.source_range.length for section in sections) + len(separator) * (
        len(sections) - 1
    )


__all__ = ["SYNTHETIC_BREAK", "SectionSegmenter", "covered_length", "segment"]
