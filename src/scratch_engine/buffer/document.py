"""Text storage with an out-of-band attachment layer.

Attachments (placeholder units) live beside the text: each one is bound to
a single offset whose character is :data:`ATTACHMENT_CHARACTER`. The storage
is the single source of truth for where attachments sit; everything else
derives their ranges by scanning it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

from .ranges import TextRange
from .sync import BufferValidationError

ATTACHMENT_CHARACTER = "￼"


@dataclass(frozen=True, slots=True)
class AttributedText:
    """Immutable text fragment carrying attachments keyed by offset."""

    text: str = ""
    attachments: Mapping[int, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        cleaned: Dict[int, object] = {}
        for offset in sorted(self.attachments):
            if not 0 <= offset < len(self.text):
                raise ValueError(
                    f"attachment offset {offset} outside text of length {len(self.text)}"
                )
            if self.text[offset] != ATTACHMENT_CHARACTER:
                raise ValueError(
                    f"attachment offset {offset} does not hold the attachment character"
                )
            cleaned[offset] = self.attachments[offset]
        object.__setattr__(self, "attachments", MappingProxyType(cleaned))

    @classmethod
    def plain(cls, text: str) -> "AttributedText":
        return cls(text=text)

    @classmethod
    def attachment(cls, value: object) -> "AttributedText":
        return cls(text=ATTACHMENT_CHARACTER, attachments={0: value})

    @classmethod
    def coerce(cls, value: Union[str, "AttributedText"]) -> "AttributedText":
        if isinstance(value, AttributedText):
            return value
        return cls(text=value)

    def __len__(self) -> int:
        return len(self.text)

    def __add__(self, other: Union[str, "AttributedText"]) -> "AttributedText":
        other = AttributedText.coerce(other)
        offset = len(self.text)
        merged = dict(self.attachments)
        merged.update({offset + key: value for key, value in other.attachments.items()})
        return AttributedText(self.text + other.text, merged)

    def __radd__(self, other: str) -> "AttributedText":
        return AttributedText.coerce(other) + self

    @property
    def has_attachments(self) -> bool:
        return bool(self.attachments)

    def slice(self, text_range: TextRange) -> "AttributedText":
        start, end = text_range.location, text_range.upper_bound
        return AttributedText(
            self.text[start:end],
            {
                offset - start: value
                for offset, value in self.attachments.items()
                if start <= offset < end
            },
        )

    def enumerate_attachments(self) -> Iterator[Tuple[object, TextRange]]:
        for offset, value in self.attachments.items():
            yield value, TextRange(offset, 1)


@dataclass(frozen=True, slots=True)
class EditDelta:
    """One atomic edit: ``removed_length`` characters at ``location`` replaced.

    ``removed`` and ``inserted`` keep the attachment layer of both sides so the
    edit log can restore attachments (and their identity) on undo.
    """

    location: int
    removed_length: int
    inserted_text: str
    version: int = 0
    removed: Optional[AttributedText] = None
    inserted: Optional[AttributedText] = None

    @classmethod
    def from_range(
        cls, text_range: TextRange, replacement: Union[str, AttributedText]
    ) -> "EditDelta":
        inserted = AttributedText.coerce(replacement)
        return cls(
            location=text_range.location,
            removed_length=text_range.length,
            inserted_text=inserted.text,
            inserted=inserted,
        )

    @property
    def replaced_range(self) -> TextRange:
        """Range the edit replaced, in pre-edit coordinates."""

        return TextRange(self.location, self.removed_length)

    @property
    def edited_range(self) -> TextRange:
        """Range of the inserted text, in post-edit coordinates."""

        return TextRange(self.location, len(self.inserted_text))

    @property
    def change_in_length(self) -> int:
        return len(self.inserted_text) - self.removed_length

    def replacement(self) -> AttributedText:
        return self.inserted or AttributedText(self.inserted_text)


class TextStorage:
    """Mutable text storage; every replacement bumps ``version``."""

    def __init__(self, text: str = "", attachments: Optional[Mapping[int, object]] = None) -> None:
        initial = AttributedText(text, attachments or {})
        self._text = initial.text
        self._attachments: Dict[int, object] = dict(initial.attachments)
        self.version = 0

    @classmethod
    def from_attributed(cls, content: AttributedText) -> "TextStorage":
        return cls(content.text, content.attachments)

    @property
    def text(self) -> str:
        return self._text

    @property
    def length(self) -> int:
        return len(self._text)

    def __len__(self) -> int:
        return len(self._text)

    @property
    def full_range(self) -> TextRange:
        return TextRange(0, len(self._text))

    def snapshot(self) -> AttributedText:
        return AttributedText(self._text, self._attachments)

    def replace(
        self, text_range: TextRange, replacement: Union[str, AttributedText]
    ) -> EditDelta:
        if text_range.upper_bound > len(self._text) or text_range.location < 0:
            raise BufferValidationError(
                f"{text_range!r} outside document of length {len(self._text)}",
                text_range=text_range,
            )
        inserted = AttributedText.coerce(replacement)
        removed = self.attributed_substring(text_range)
        start, end = text_range.location, text_range.upper_bound
        delta = len(inserted) - text_range.length

        shifted: Dict[int, object] = {}
        for offset, value in self._attachments.items():
            if offset < start:
                shifted[offset] = value
            elif offset >= end:
                shifted[offset + delta] = value
        for offset, value in inserted.attachments.items():
            shifted[start + offset] = value

        self._text = self._text[:start] + inserted.text + self._text[end:]
        self._attachments = dict(sorted(shifted.items()))
        self.version += 1
        return EditDelta(
            location=start,
            removed_length=text_range.length,
            inserted_text=inserted.text,
            version=self.version,
            removed=removed,
            inserted=inserted,
        )

    def substring(self, text_range: TextRange) -> str:
        return self._text[text_range.as_slice()]

    def attributed_substring(self, text_range: TextRange) -> AttributedText:
        return self.snapshot().slice(text_range)

    def attachment_at(self, location: int) -> Optional[object]:
        return self._attachments.get(location)

    def contains_attachments(self, text_range: Optional[TextRange] = None) -> bool:
        return next(self.enumerate_attachments(text_range), None) is not None

    def enumerate_attachments(
        self, text_range: Optional[TextRange] = None, *, reverse: bool = False
    ) -> Iterator[Tuple[object, TextRange]]:
        """Yield ``(attachment, range)`` pairs in location order."""

        scope = text_range or self.full_range
        offsets = [
            offset
            for offset in self._attachments
            if scope.location <= offset < scope.upper_bound
        ]
        if reverse:
            offsets.reverse()
        for offset in offsets:
            yield self._attachments[offset], TextRange(offset, 1)


__all__ = ["ATTACHMENT_CHARACTER", "AttributedText", "EditDelta", "TextStorage"]
