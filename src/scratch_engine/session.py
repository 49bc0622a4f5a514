"""Editor session: the host boundary of the synchronization engine.

A session owns one buffer and keeps every derived structure in step with
it: sections, the range map, the placeholder index, and the highlight
cache. Hosts feed it text, edits, selections and viewport changes, and
listen on :attr:`EditorSession.channel` for what to redraw.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from scratch_engine.buffer import Buffer, EditDelta, TextRange, aggregate
from scratch_engine.config import EngineConfig
from scratch_engine.events import (
    HIGHLIGHT_APPLY,
    OUTLINE_SELECT,
    OUTLINE_UPDATED,
    PLACEHOLDER_SELECTED,
    RENDER_REVEAL,
    RENDER_SCROLL_LINE,
    RENDER_UPDATE,
    EventChannel,
)
from scratch_engine.highlight import DirtyRegionTracker, SectionHighlight
from scratch_engine.placeholders import (
    DEFAULT_POLICY,
    Placeholder,
    PlaceholderIndex,
    ReplacementPolicy,
    UnrenderMode,
    render_placeholders,
    unrender,
)
from scratch_engine.runtime import telemetry
from scratch_engine.structure import (
    SYNTHETIC_BREAK,
    OutlineEntry,
    OutlineNode,
    RangeMap,
    RangeMapper,
    Section,
    SectionSegmenter,
    build_entries,
    build_tree,
)


@dataclass(frozen=True, slots=True)
class RevealRequest:
    index: int
    source_range: TextRange


def _carry_edited_range(previous: Optional[TextRange], delta: EditDelta) -> TextRange:
    """Fold ``delta`` into an edited range accumulated over earlier edits."""

    if previous is None:
        return delta.edited_range
    replaced_end = delta.location + delta.removed_length
    if previous.location >= replaced_end:
        carried = previous.shifted(delta.change_in_length)
    elif previous.upper_bound <= delta.location:
        carried = previous
    else:
        carried = TextRange.between(
            min(previous.location, delta.location),
            max(previous.upper_bound + delta.change_in_length, delta.edited_range.upper_bound),
        )
    return aggregate((carried, delta.edited_range))


class EditorSession:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        channel: Optional[EventChannel] = None,
        *,
        policy: ReplacementPolicy = DEFAULT_POLICY,
        name: str = "scratch",
    ) -> None:
        self.config = config or EngineConfig.from_env()
        self.channel = channel or EventChannel()
        self.policy = policy
        self.buffer = Buffer(name=name)
        self.placeholders = PlaceholderIndex(self.buffer)
        self.segmenter = SectionSegmenter(self.config.separator)
        self.mapper = RangeMapper()
        self.range_map = RangeMap()
        self.tracker = DirtyRegionTracker(self.range_map, on_apply=self._emit_highlight)
        self.selected_index: Optional[int] = None
        self.cursor_position = 0
        self._batch_depth = 0
        self._pending: Optional[TextRange] = None
        self._announced: Optional[Placeholder] = None
        self.buffer.add_listener(self._on_buffer_edit)
        self._refresh(TextRange(0, 0))

    # -- derived state ------------------------------------------------------

    @property
    def sections(self) -> List[Section]:
        return self.range_map.sections

    @property
    def text(self) -> str:
        return self.buffer.text

    def section_range_at(self, location: int) -> Optional[TextRange]:
        for section in self.range_map.sections:
            if section.source_range.contains(location):
                return section.source_range
        return None

    def _on_buffer_edit(self, delta: EditDelta) -> None:
        self._pending = _carry_edited_range(self._pending, delta)
        if self._batch_depth == 0:
            self._flush()

    def _flush(self) -> None:
        pending, self._pending = self._pending, None
        if pending is not None:
            self._refresh(pending)

    @contextmanager
    def _batch(self) -> Iterator[None]:
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._flush()

    @contextmanager
    def editing(self, label: str) -> Iterator[Buffer]:
        """Group buffer edits into one undo step and one structure refresh."""

        with self._batch(), self.buffer.grouped(label):
            yield self.buffer
            self._ensure_trailing_newline()

    def _ensure_trailing_newline(self) -> None:
        if not self.config.trailing_newline or self.buffer.text.endswith(SYNTHETIC_BREAK):
            return
        self.buffer.replace_range(
            TextRange(self.buffer.length, 0),
            SYNTHETIC_BREAK,
            label="trailing_newline",
            select=self.buffer.selection,
        )

    def _refresh(self, edited_range: TextRange) -> None:
        with telemetry.span(
            "session::refresh",
            metadata={"buffer": self.buffer.name, "edited": edited_range},
        ):
            sections = self.segmenter.segment(self.buffer.text)
            self.range_map = self.mapper.rebuild(sections)
            self.tracker.rebind(self.range_map)
            if self.config.dirty_tracking:
                self.tracker.invalidate(edited_range)
                dirty = self.tracker.compute_dirty(edited_range, self.buffer.state.visible_range)
            else:
                dirty = self.range_map.sections_near(edited_range)
            self.tracker.apply(dirty)
        self._announce_placeholder(self.placeholders.selected)
        self.channel.emit(OUTLINE_UPDATED, self.outline_entries())
        if self.config.live_render:
            self.channel.emit(RENDER_UPDATE, self.render_payloads())

    def _emit_highlight(self, highlights: List[SectionHighlight]) -> None:
        self.channel.emit(HIGHLIGHT_APPLY, highlights)

    def _announce_placeholder(self, placeholder: Optional[Placeholder], force: bool = False) -> None:
        if force or placeholder is not self._announced:
            self._announced = placeholder
            self.channel.emit(PLACEHOLDER_SELECTED, placeholder)

    # -- host input ---------------------------------------------------------

    def load(self, source_text: str) -> int:
        """Replace the buffer with ``source_text``; returns the placeholder count."""

        with telemetry.span("session::load", component=True):
            rendered, count = render_placeholders(source_text, self.config.syntaxes)
            self.placeholders.deselect()
            with self.editing("load"):
                self.buffer.replace_range(self.buffer.storage.full_range, rendered, label="load")
            self.buffer.log.clear()
            self.buffer.set_caret(0)
            self.selected_index = None
            self.cursor_position = 0
        telemetry.record_event(
            "session.load",
            data={"placeholders": count, "sections": len(self.range_map), "length": self.buffer.length},
        )
        return count

    def on_text_changed(self, full_text: Optional[str] = None) -> List[Section]:
        """Full re-segmentation; ``full_text`` (markup form) reloads when it differs."""

        if full_text is not None and full_text != self.source_text():
            caret = min(self.buffer.state.caret, len(full_text))
            rendered, _ = render_placeholders(full_text, self.config.syntaxes)
            self.placeholders.deselect()
            with self.editing("replace_text"):
                self.buffer.replace_range(
                    self.buffer.storage.full_range, rendered, label="replace_text"
                )
            self.buffer.set_caret(min(caret, self.buffer.length))
        else:
            self._refresh(self.buffer.storage.full_range)
        return self.sections

    def on_edit(self, delta: EditDelta) -> EditDelta:
        """Apply an edit made in the host, described in pre-edit coordinates."""

        with self.editing("host_edit"):
            applied = self.buffer.apply_delta(delta)
        return applied

    def apply_edit(self, text_range: TextRange, text: str) -> EditDelta:
        return self.on_edit(EditDelta.from_range(text_range, text))

    def undo(self) -> bool:
        with self._batch():
            return self.buffer.undo() is not None

    def redo(self) -> bool:
        with self._batch():
            return self.buffer.redo() is not None

    def on_selection_changed(self, selected: TextRange) -> Optional[int]:
        """Track the host selection; returns the index of the section it falls in."""

        self.buffer.set_selection(selected)
        self._announce_placeholder(self.placeholders.sync_selection(selected))
        return self._follow_selection(selected)

    def _follow_selection(self, selected: TextRange) -> Optional[int]:
        index = self.range_map.index_for_range(selected)
        if index is None:
            return None
        self.cursor_position = selected.location
        self.channel.emit(OUTLINE_SELECT, index)
        if self.config.line_to_line:
            if index == self.selected_index:
                self.channel.emit(RENDER_SCROLL_LINE, index)
            else:
                self._emit_reveal(index)
        self.selected_index = index
        return index

    def on_viewport_changed(
        self, visible_range: TextRange, ignore_cached: bool = False
    ) -> List[Section]:
        self.buffer.state.set_visible_range(visible_range)
        return self.tracker.highlight_visible(visible_range, ignore_cached=ignore_cached)

    def reveal(self, index: int) -> Optional[TextRange]:
        source_range = self.range_map.range_for_index(index)
        if source_range is None:
            return None
        self._emit_reveal(index)
        return source_range

    def _emit_reveal(self, index: int) -> None:
        source_range = self.range_map.range_for_index(index)
        if source_range is not None:
            self.channel.emit(RENDER_REVEAL, RevealRequest(index, source_range))

    # -- placeholders -------------------------------------------------------

    def select_placeholder(self, placeholder: Placeholder) -> TextRange:
        unit = self.placeholders.select(placeholder)
        self._announce_placeholder(placeholder, force=True)
        self._follow_selection(unit)
        return unit

    def deselect_placeholder(self) -> None:
        if self.placeholders.selected is not None:
            self.placeholders.deselect()
            self._announce_placeholder(None)

    # -- output -------------------------------------------------------------

    def display_text(self, text_range: Optional[TextRange] = None) -> str:
        return unrender(self.buffer.storage, text_range, UnrenderMode.CONTENT)

    def outline_entries(self) -> List[OutlineEntry]:
        return build_entries(
            self.range_map.sections,
            lambda section: self.display_text(section.source_range),
        )

    def outline_tree(self) -> List[OutlineNode]:
        return build_tree(self.range_map.sections)

    def render_payloads(self) -> List[Tuple[int, str]]:
        return [
            (section.index, self.display_text(section.source_range))
            for section in self.range_map.sections
        ]

    def source_text(self) -> str:
        """Buffer text with placeholders written back as markup."""

        return unrender(
            self.buffer.storage,
            mode=UnrenderMode.MARKUP,
            syntax=self.config.output_syntax,
        )

    def clipboard_text(self, text_range: Optional[TextRange] = None) -> str:
        return self.display_text(text_range or self.buffer.selection)

    def blank_text(self) -> str:
        """Buffer text with each placeholder as the blank marker; lengths match the buffer."""

        return unrender(
            self.buffer.storage,
            mode=UnrenderMode.BLANK,
            blank_marker=self.config.blank_marker,
        )


__all__ = ["EditorSession", "RevealRequest"]
