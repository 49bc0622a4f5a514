"""Textual-facing adapter that wires an EditorSession into UI callbacks.

Nothing here imports textual: the adapter speaks in ``(row, column)``
locations and plain strings so it can be driven by tests and by any
widget that edits a single text document.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from scratch_engine.actions import ActionResult, click, handle_key
from scratch_engine.buffer import BufferMirror, EditDelta, TextRange
from scratch_engine.events import (
    HIGHLIGHT_APPLY,
    OUTLINE_SELECT,
    OUTLINE_UPDATED,
    PLACEHOLDER_SELECTED,
    RENDER_REVEAL,
    RENDER_SCROLL_LINE,
    RENDER_UPDATE,
)
from scratch_engine.session import EditorSession
from scratch_engine.structure import OutlineEntry, Section
from scratch_engine.templates import TemplateInserter

Location = Tuple[int, int]


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_outline: Callable[[List[OutlineEntry]], None] = _noop
    select_outline: Callable[[int], None] = _noop
    update_preview: Callable[[List[Tuple[int, str]]], None] = _noop
    update_status: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


def diff_text(before: str, after: str, caret: Optional[int] = None) -> Optional[EditDelta]:
    """Smallest single replacement turning ``before`` into ``after``.

    When the same replacement fits at several offsets (typing a character
    next to an identical one), ``caret`` picks the offset that starts or
    ends there. Without it the rightmost offset wins.
    """

    if before == after:
        return None
    limit = min(len(before), len(after))
    prefix = 0
    while prefix < limit and before[prefix] == after[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < limit - prefix
        and before[len(before) - 1 - suffix] == after[len(after) - 1 - suffix]
    ):
        suffix += 1
    removed = len(before) - prefix - suffix
    if caret is not None:
        slide = 0
        while (
            slide < prefix
            and before[len(before) - suffix - slide - 1] == after[len(after) - suffix - slide - 1]
        ):
            slide += 1
        for location in (caret, caret - removed):
            if prefix - slide <= location < prefix:
                suffix += prefix - location
                prefix = location
                break
    return EditDelta(
        location=prefix,
        removed_length=removed,
        inserted_text=after[prefix : len(after) - suffix],
    )


class TextualEditorAdapter:
    """Bridges an EditorSession and its event channel to a Textual surface.

    The host widget shows :meth:`display_text`, where every placeholder is
    one marker character, so widget offsets and buffer offsets agree. The
    adapter satisfies :class:`~scratch_engine.buffer.BufferSync`.
    """

    def __init__(self, session: EditorSession, hooks: TextualUIHooks) -> None:
        self.session = session
        self.hooks = hooks
        self.templates = TemplateInserter(session)
        self._subscribe_events()
        self._refresh_buffer()
        self.hooks.update_outline(self.session.outline_entries())
        self.hooks.update_preview(self.session.render_payloads())

    # -- coordinates --------------------------------------------------------

    def display_text(self) -> str:
        return self.session.blank_text()

    def location_for(self, position: Location) -> int:
        row, column = position
        lines = self.display_text().split("\n")
        row = max(0, min(row, len(lines) - 1))
        column = max(0, min(column, len(lines[row])))
        return sum(len(line) + 1 for line in lines[:row]) + column

    def position_for(self, location: int) -> Location:
        text = self.display_text()
        location = max(0, min(location, len(text)))
        before = text[:location]
        row = before.count("\n")
        return row, location - (before.rfind("\n") + 1)

    def range_for(self, start: Location, end: Location) -> TextRange:
        return TextRange.between(self.location_for(start), self.location_for(end))

    def selection_positions(self) -> Tuple[Location, Location]:
        selected = self.session.buffer.selection
        return self.position_for(selected.location), self.position_for(selected.upper_bound)

    # -- host input ---------------------------------------------------------

    def load(self, source_text: str) -> None:
        self.session.load(source_text)
        self._refresh_buffer()

    def handle_text_change(self, new_text: str) -> Optional[EditDelta]:
        """Forward whatever the widget changed as a single host edit.

        The caret from before the change anchors the diff, so a marker typed
        beside a placeholder lands on the side the user typed on.
        """

        caret = self.session.buffer.selection.location
        delta = diff_text(self.display_text(), new_text, caret=caret)
        if delta is None:
            return None
        applied = self.push_host_edit(delta)
        if self.display_text() != new_text:
            self._refresh_buffer()
        return applied

    def handle_selection(self, start: Location, end: Location) -> Optional[int]:
        return self.session.on_selection_changed(self.range_for(start, end))

    def handle_scroll(self, first_row: int, row_count: int) -> List[Section]:
        start = self.location_for((first_row, 0))
        end = self.location_for((first_row + max(row_count, 1), 0))
        return self.session.on_viewport_changed(TextRange.between(start, end))

    def handle_textual_key(self, key: str) -> ActionResult:
        self._log_state("key ->", key=key)
        version = self.session.buffer.version
        result = handle_key(self.session, key)
        self._after_action(result, version)
        return result

    def handle_click(self, position: Location, click_count: int = 1) -> ActionResult:
        version = self.session.buffer.version
        result = click(self.session, self.location_for(position), click_count)
        self._after_action(result, version)
        return result

    def apply_template(self, name: str) -> TextRange:
        selection = self.templates.apply(name)
        self._refresh_buffer()
        self.hooks.update_status(f"template::{name}")
        return selection

    def undo(self) -> bool:
        changed = self.session.undo()
        if changed:
            self._refresh_buffer()
        return changed

    def redo(self) -> bool:
        changed = self.session.redo()
        if changed:
            self._refresh_buffer()
        return changed

    def reveal(self, index: int) -> Optional[TextRange]:
        return self.session.reveal(index)

    def _after_action(self, result: ActionResult, version: int) -> None:
        if result.consumed:
            self.hooks.update_status(result.message or result.status)
            self._refresh_buffer()
        elif self.session.buffer.version != version:
            self._refresh_buffer()

    # -- session output -----------------------------------------------------

    def _subscribe_events(self) -> None:
        channel = self.session.channel
        channel.subscribe(OUTLINE_UPDATED, self._on_outline_updated)
        channel.subscribe(OUTLINE_SELECT, self._on_outline_select)
        channel.subscribe(RENDER_UPDATE, self._on_render_update)
        for event in (
            HIGHLIGHT_APPLY,
            PLACEHOLDER_SELECTED,
            RENDER_REVEAL,
            RENDER_SCROLL_LINE,
        ):
            channel.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _on_outline_updated(self, payload: object) -> None:
        if isinstance(payload, list):
            self.hooks.update_outline(payload)

    def _on_outline_select(self, payload: object) -> None:
        if isinstance(payload, int):
            self.hooks.select_outline(payload)

    def _on_render_update(self, payload: object) -> None:
        if isinstance(payload, list):
            self.hooks.update_preview(payload)

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name, payload=payload)
        self.hooks.handle_event(name, payload)
        if name == PLACEHOLDER_SELECTED:
            label = getattr(payload, "label", None)
            self.hooks.update_status(f"placeholder::{label}" if label else "")

    # -- buffer sync ----------------------------------------------------------

    def pull_buffer(self) -> BufferMirror:
        """Snapshot for the widget; placeholders appear as the blank marker."""

        mirror = self.session.buffer.mirror(
            attributes={"placeholders": str(len(self.session.placeholders))}
        )
        mirror.text = self.display_text()
        return mirror

    def push_host_edit(self, delta: EditDelta) -> EditDelta:
        self._log_state("edit ->", location=delta.location, removed=delta.removed_length)
        return self.session.on_edit(delta)

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self.pull_buffer())

    def _log_state(self, prefix: str, **fields: object) -> None:
        try:
            snapshot = self._state_metadata()
            snapshot.update({k: v for k, v in fields.items() if v is not None})
            parts = [prefix]
            for key, value in snapshot.items():
                parts.append(f"{key}={value!r}")
            self.hooks.log(" ".join(parts))
        except Exception:
            pass

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.session.buffer
        selected = self.session.placeholders.selected
        return {
            "selection": buffer.selection,
            "section": self.session.selected_index,
            "placeholder": selected.label if selected else None,
            "buffer": buffer.name,
            "buffer_version": buffer.version,
        }


__all__ = ["TextualEditorAdapter", "TextualUIHooks", "diff_text"]
