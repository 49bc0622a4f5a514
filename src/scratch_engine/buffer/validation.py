"""Validation helpers shared across buffer services."""

from __future__ import annotations

from .document import TextStorage
from .ranges import TextRange
from .sync import BufferValidationError


def ensure_location(storage: TextStorage, location: int) -> int:
    if location < 0 or location > storage.length:
        raise BufferValidationError(
            f"Location {location} out of range for length {storage.length}",
            location=location,
        )
    return location


def ensure_range(storage: TextStorage, text_range: TextRange) -> TextRange:
    if text_range.location < 0 or text_range.upper_bound > storage.length:
        raise BufferValidationError(
            f"{text_range!r} out of range for length {storage.length}",
            text_range=text_range,
        )
    return text_range


__all__ = ["ensure_location", "ensure_range"]
