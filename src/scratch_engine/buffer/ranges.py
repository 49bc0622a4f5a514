"""Character range value type shared by every engine component."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True, slots=True, order=True)
class TextRange:
    """Half-open ``[location, location + length)`` span of buffer offsets."""

    location: int
    length: int = 0

    def __post_init__(self) -> None:
        if self.length < 0:
            raise ValueError(f"range length cannot be negative: {self.length}")

    @classmethod
    def between(cls, start: int, end: int) -> "TextRange":
        if start > end:
            start, end = end, start
        return cls(start, end - start)

    @property
    def upper_bound(self) -> int:
        return self.location + self.length

    @property
    def is_empty(self) -> bool:
        return self.length == 0

    def contains(self, location: int) -> bool:
        return self.location <= location < self.upper_bound

    def intersection(self, other: "TextRange") -> Optional["TextRange"]:
        """Overlap of both ranges; touching ranges give an empty overlap.

        ``None`` only when the ranges are separated by at least one offset.
        """

        start = max(self.location, other.location)
        end = min(self.upper_bound, other.upper_bound)
        if start > end:
            return None
        return TextRange(start, end - start)

    def intersects(self, other: "TextRange") -> bool:
        return self.intersection(other) is not None

    def shifted(self, delta: int) -> "TextRange":
        return TextRange(self.location + delta, self.length)

    def as_slice(self) -> slice:
        return slice(self.location, self.upper_bound)

    def __repr__(self) -> str:
        return f"TextRange({self.location}, {self.length})"


def aggregate(ranges: Iterable[TextRange]) -> Optional[TextRange]:
    """Smallest range covering every range in ``ranges``."""

    items = list(ranges)
    if not items:
        return None
    start = min(item.location for item in items)
    end = max(item.upper_bound for item in items)
    return TextRange(start, end - start)


__all__ = ["TextRange", "aggregate"]
