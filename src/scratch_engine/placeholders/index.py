"""Lookup, navigation, and editing of placeholder units in a buffer.

The index never stores ranges of its own: it scans the storage's attachment
layer and caches the result until the storage version changes, so ranges
are always consistent with the text however the buffer was mutated.
"""

from __future__ import annotations

from typing import List, Optional, Union

from scratch_engine.buffer import AttributedText, Buffer, TextRange
from scratch_engine.containers import OrderedMap
from scratch_engine.runtime import telemetry

from .actions import DEFAULT_POLICY, ReplacementAction, ReplacementPolicy, UserAction
from .model import Placeholder


class PlaceholderError(LookupError):
    """A mutating operation addressed a placeholder that is not in the buffer."""

    def __init__(self, message: str, *, placeholder: Optional[Placeholder] = None) -> None:
        super().__init__(message)
        self.placeholder = placeholder


class PlaceholderIndex:
    def __init__(self, buffer: Buffer) -> None:
        self.buffer = buffer
        self._version: Optional[int] = None
        self._placeholders: OrderedMap[Placeholder, TextRange] = OrderedMap()
        self._selected: Optional[Placeholder] = None

    def _refresh(self) -> None:
        storage = self.buffer.storage
        if self._version == storage.version:
            return
        placeholders: OrderedMap[Placeholder, TextRange] = OrderedMap()
        for attachment, unit in storage.enumerate_attachments():
            if isinstance(attachment, Placeholder):
                placeholders[attachment] = unit
        self._placeholders = placeholders
        self._version = storage.version
        if self._selected is not None and self._selected not in placeholders:
            self._selected.is_selected = False
            self._selected = None

    # -- queries ------------------------------------------------------------

    @property
    def placeholders(self) -> OrderedMap[Placeholder, TextRange]:
        self._refresh()
        return self._placeholders

    @property
    def has_placeholders(self) -> bool:
        return len(self.placeholders) > 0

    def __len__(self) -> int:
        return len(self.placeholders)

    def range_of(self, placeholder: Placeholder) -> Optional[TextRange]:
        return self.placeholders.get(placeholder)

    def location_of(self, placeholder: Placeholder) -> Optional[int]:
        found = self.range_of(placeholder)
        return found.location if found else None

    def placeholder_at(self, location: int) -> Optional[Placeholder]:
        if not 0 <= location < self.buffer.length:
            return None
        attachment = self.buffer.storage.attachment_at(location)
        return attachment if isinstance(attachment, Placeholder) else None

    def placeholder_at_range(self, text_range: TextRange) -> Optional[Placeholder]:
        if text_range.length != 1 or text_range.upper_bound > self.buffer.length:
            return None
        return self.placeholder_at(text_range.location)

    def all_in(self, text_range: Optional[TextRange] = None) -> List[Placeholder]:
        if text_range is None:
            return self.placeholders.keys()
        return [
            placeholder
            for placeholder, unit in self.placeholders.items()
            if text_range.location <= unit.location < text_range.upper_bound
        ]

    def first_in(self, text_range: Optional[TextRange] = None) -> Optional[Placeholder]:
        for placeholder, unit in self.placeholders.items():
            if text_range is None or (
                text_range.location <= unit.location < text_range.upper_bound
            ):
                return placeholder
        return None

    def nearest_from(
        self, location: int, lookahead: int = 0, loop: bool = True
    ) -> Optional[Placeholder]:
        """First placeholder at or after ``location - lookahead``.

        When nothing follows and ``loop`` is set the search wraps to the
        stretch between the buffer start and the search start.
        """

        start = max(0, location - lookahead)
        found = self.first_in(TextRange.between(start, max(start, self.buffer.length)))
        if found is None and loop:
            found = self.first_in(TextRange(0, start))
        return found

    def next(self, after: Placeholder, loop: bool = True) -> Optional[Placeholder]:
        ordered = self.placeholders
        current = ordered.get(after)
        if current is None or len(ordered) <= 1:
            return None
        for placeholder, unit in ordered.items():
            if unit.location > current.location:
                return placeholder
        return ordered.key_at(0) if loop else None

    def previous(self, before: Placeholder, loop: bool = True) -> Optional[Placeholder]:
        ordered = self.placeholders
        current = ordered.get(before)
        if current is None or len(ordered) <= 1:
            return None
        for placeholder in reversed(ordered):
            if ordered[placeholder].location < current.location:
                return placeholder
        return ordered.key_at(len(ordered) - 1) if loop else None

    # -- selection ----------------------------------------------------------

    @property
    def selected(self) -> Optional[Placeholder]:
        self._refresh()
        return self._selected

    @property
    def has_selected_placeholder(self) -> bool:
        return self.selected is not None

    def _mark_selected(self, placeholder: Optional[Placeholder]) -> None:
        if self._selected is not None and self._selected != placeholder:
            self._selected.is_selected = False
        self._selected = placeholder
        if placeholder is not None:
            placeholder.is_selected = True

    def select(self, placeholder: Placeholder) -> TextRange:
        unit = self.range_of(placeholder)
        if unit is None:
            raise PlaceholderError(
                f"{placeholder!r} is not in the buffer", placeholder=placeholder
            )
        self._mark_selected(placeholder)
        self.buffer.set_selection(unit)
        return unit

    def deselect(self) -> None:
        self._mark_selected(None)

    def sync_selection(self, text_range: TextRange) -> Optional[Placeholder]:
        """Mirror a host selection: a unit range selects, anything else deselects."""

        self._refresh()
        placeholder = self.placeholder_at_range(text_range)
        self._mark_selected(placeholder)
        return placeholder

    # -- edits --------------------------------------------------------------

    def insert(self, placeholder: Union[Placeholder, str], at: int) -> Placeholder:
        unit = placeholder if isinstance(placeholder, Placeholder) else Placeholder(placeholder)
        with telemetry.span("placeholder::insert", metadata={"label": unit.label}):
            self.buffer.replace_range(
                TextRange(at, 0), AttributedText.attachment(unit), label="placeholder_insert"
            )
        return unit

    def append(self, placeholder: Union[Placeholder, str]) -> Placeholder:
        return self.insert(placeholder, self.buffer.length)

    def _require(self, placeholder: Placeholder) -> TextRange:
        unit = self.range_of(placeholder)
        if unit is None:
            raise PlaceholderError(
                f"{placeholder!r} is not in the buffer", placeholder=placeholder
            )
        return unit

    def delete(self, placeholder: Placeholder) -> int:
        """Remove the unit and leave the caret where it stood."""

        unit = self._require(placeholder)
        if self._selected == placeholder:
            self.deselect()
        with telemetry.span("placeholder::delete", metadata={"label": placeholder.label}):
            self.buffer.replace_range(
                unit,
                "",
                label="placeholder_delete",
                select=TextRange(unit.location, 0),
            )
        telemetry.record_event(
            "placeholder.delete",
            level="debug",
            data={"label": placeholder.label, "location": unit.location},
        )
        return unit.location

    def materialize(self, placeholder: Placeholder) -> TextRange:
        """Replace the unit with its replacement (or label) as plain text."""

        unit = self._require(placeholder)
        if self._selected == placeholder:
            self.deselect()
        with telemetry.span(
            "placeholder::materialize", metadata={"label": placeholder.label}
        ):
            delta = self.buffer.replace_range(
                unit, placeholder.text, label="placeholder_materialize"
            )
        telemetry.record_event(
            "placeholder.materialize",
            level="debug",
            data={"label": placeholder.label, "location": unit.location},
        )
        return delta.edited_range

    def perform(
        self,
        placeholder: Placeholder,
        action: UserAction,
        policy: ReplacementPolicy = DEFAULT_POLICY,
    ) -> ReplacementAction:
        resolved = policy.resolve(action, placeholder)
        if resolved is ReplacementAction.DELETE:
            self.delete(placeholder)
        elif resolved is ReplacementAction.INSERT:
            self.materialize(placeholder)
        return resolved


__all__ = ["PlaceholderError", "PlaceholderIndex"]
