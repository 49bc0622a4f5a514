"""High-level buffer façade combining storage, selection state, and the edit log."""

from __future__ import annotations

from contextlib import AbstractContextManager, contextmanager
from typing import Callable, ContextManager, Iterator, List, Optional, Union

from scratch_engine.runtime import telemetry

from .document import AttributedText, EditDelta, TextStorage
from .ranges import TextRange
from .state import SelectionState
from .sync import BufferMirror
from .undo import EditLog, UndoEntry, UndoGroup
from .validation import ensure_location, ensure_range

EditListener = Callable[[EditDelta], None]


class Buffer:
    def __init__(
        self,
        *,
        name: str = "default",
        storage: Optional[TextStorage] = None,
        state: Optional[SelectionState] = None,
        log: Optional[EditLog] = None,
    ) -> None:
        self.name = name
        self.storage = storage or TextStorage()
        self.state = state or SelectionState()
        self.log = log or EditLog()
        self._listeners: List[EditListener] = []

    @classmethod
    def from_text(
        cls, text: Union[str, AttributedText], *, name: str = "default"
    ) -> "Buffer":
        return cls(name=name, storage=TextStorage.from_attributed(AttributedText.coerce(text)))

    @property
    def text(self) -> str:
        return self.storage.text

    @property
    def length(self) -> int:
        return self.storage.length

    @property
    def version(self) -> int:
        return self.storage.version

    @property
    def selection(self) -> TextRange:
        return self.state.selected_range

    def snapshot(self) -> AttributedText:
        return self.storage.snapshot()

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> BufferMirror:
        return BufferMirror(
            text=self.storage.text,
            selection=self.state.selected_range,
            version=self.storage.version,
            attributes=dict(attributes or {}),
        )

    def add_listener(self, listener: EditListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: EditListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, delta: EditDelta) -> None:
        for listener in list(self._listeners):
            listener(delta)

    # -- edits --------------------------------------------------------------

    def replace_range(
        self,
        text_range: TextRange,
        replacement: Union[str, AttributedText],
        *,
        label: str = "replace_range",
        coalesce: bool = False,
        select: Optional[TextRange] = None,
    ) -> EditDelta:
        """Replace ``text_range`` and leave the caret after the inserted text.

        ``select`` overrides the selection left behind by the edit.
        """

        ensure_range(self.storage, text_range)
        with Transaction(self, label) as tx:
            selection_before = self.state.selected_range
            delta = self.storage.replace(text_range, replacement)
            self.state.set_selection(
                select if select is not None else TextRange(delta.edited_range.upper_bound, 0)
            )
            self.state.last_change_version = delta.version
            tx.commit(delta, selection_before, self.state.selected_range, coalesce=coalesce)
        self._notify(delta)
        return delta

    def insert_text(
        self, text: Union[str, AttributedText], *, location: Optional[int] = None
    ) -> EditDelta:
        position = self.state.caret if location is None else location
        ensure_location(self.storage, position)
        return self.replace_range(
            TextRange(position, 0), text, label="insert_text", coalesce=True
        )

    def delete_range(self, text_range: TextRange) -> EditDelta:
        return self.replace_range(text_range, "", label="delete_range", coalesce=True)

    def apply_delta(self, delta: EditDelta, *, label: str = "host_edit") -> EditDelta:
        """Apply an edit described by the host in pre-edit coordinates."""

        return self.replace_range(delta.replaced_range, delta.replacement(), label=label)

    def get_text_range(self, text_range: TextRange) -> str:
        return self.storage.substring(ensure_range(self.storage, text_range))

    # -- selection ----------------------------------------------------------

    def set_selection(self, text_range: TextRange) -> TextRange:
        self.state.set_selection(ensure_range(self.storage, text_range))
        return text_range

    def set_caret(self, location: int) -> None:
        self.state.set_caret(ensure_location(self.storage, location))

    # -- history ------------------------------------------------------------

    @contextmanager
    def grouped(self, label: str) -> Iterator[None]:
        """Collapse every edit made inside the block into one undo step."""

        self.log.begin_group(label)
        try:
            yield
        finally:
            self.log.end_group()

    def break_coalescing(self) -> None:
        self.log.break_coalescing()

    def undo(self) -> Optional[UndoGroup]:
        group = self.log.undo()
        if group is None:
            return None
        with telemetry.span(
            name="buffer::undo", component=True, metadata={"buffer": self.name}
        ):
            for entry in reversed(group.entries):
                delta = entry.delta
                inserted = TextRange(delta.location, len(delta.inserted_text))
                self._replay(inserted, delta.removed or AttributedText())
            self.state.set_selection(group.selection_before)
        return group

    def redo(self) -> Optional[UndoGroup]:
        group = self.log.redo()
        if group is None:
            return None
        with telemetry.span(
            name="buffer::redo", component=True, metadata={"buffer": self.name}
        ):
            for entry in group.entries:
                self._replay(entry.delta.replaced_range, entry.delta.replacement())
            self.state.set_selection(group.selection_after)
        return group

    def _replay(self, text_range: TextRange, replacement: AttributedText) -> None:
        delta = self.storage.replace(text_range, replacement)
        self.state.last_change_version = delta.version
        self._notify(delta)


class Transaction(AbstractContextManager["Transaction"]):
    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    def commit(
        self,
        delta: EditDelta,
        selection_before: TextRange,
        selection_after: TextRange,
        *,
        coalesce: bool = False,
    ) -> None:
        entry = UndoEntry(
            label=self.label,
            delta=delta,
            selection_before=selection_before,
            selection_after=selection_after,
        )
        self.buffer.log.record(entry, coalesce=coalesce)

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


__all__ = ["Buffer", "EditListener", "Transaction"]
