"""Inline TeX span detection."""

from __future__ import annotations

from typing import List

from scratch_engine.buffer import TextRange

TEX_DELIMITER = "$"


def math_ranges(content: str, base: int = 0) -> List[TextRange]:
    """Ranges between matching ``$`` delimiters, offset by ``base``.

    A backslash escapes the next character. A trailing unmatched ``$``
    opens nothing.
    """

    ranges: List[TextRange] = []
    opened = None
    escaped = False
    for offset, char in enumerate(content):
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
        elif char == TEX_DELIMITER:
            if opened is None:
                opened = offset + 1
            else:
                ranges.append(TextRange(base + opened, offset - opened))
                opened = None
    return ranges


__all__ = ["TEX_DELIMITER", "math_ranges"]
