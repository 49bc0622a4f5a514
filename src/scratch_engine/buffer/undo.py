"""Command log for undo/redo with grouping and typing coalescence."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .document import EditDelta
from .ranges import TextRange


@dataclass(slots=True)
class UndoEntry:
    label: str
    delta: EditDelta
    selection_before: TextRange
    selection_after: TextRange


@dataclass(slots=True)
class UndoGroup:
    """One undo step: every entry is reverted together."""

    label: str
    entries: List[UndoEntry] = field(default_factory=list)
    coalescing: bool = False

    @property
    def selection_before(self) -> TextRange:
        return self.entries[0].selection_before

    @property
    def selection_after(self) -> TextRange:
        return self.entries[-1].selection_after

    def accepts(self, entry: UndoEntry) -> bool:
        """Typing continues the previous edit when it touches its end."""

        if not self.coalescing or not self.entries or entry.label != self.label:
            return False
        previous = self.entries[-1].delta
        current = entry.delta
        if current.removed_length == 0 and current.inserted_text:
            return current.location == previous.location + len(previous.inserted_text)
        if not current.inserted_text and not previous.inserted_text:
            return (
                current.location + current.removed_length == previous.location
                or current.location == previous.location
            )
        return False


class EditLog:
    """Linear undo/redo history of grouped edits."""

    def __init__(self) -> None:
        self._groups: List[UndoGroup] = []
        self._index: int = -1
        self._open: List[UndoGroup] = []
        self._coalescing_broken = True

    def record(self, entry: UndoEntry, *, coalesce: bool = False) -> None:
        if self._open:
            self._open[-1].entries.append(entry)
            return
        current = self._groups[self._index] if self._index >= 0 else None
        if (
            coalesce
            and not self._coalescing_broken
            and current is not None
            and not self.can_redo()
            and current.accepts(entry)
        ):
            current.entries.append(entry)
            return
        self._push(UndoGroup(label=entry.label, entries=[entry], coalescing=coalesce))
        self._coalescing_broken = not coalesce

    def _push(self, group: UndoGroup) -> None:
        if self._index < len(self._groups) - 1:
            self._groups = self._groups[: self._index + 1]
        self._groups.append(group)
        self._index = len(self._groups) - 1

    def begin_group(self, label: str) -> None:
        self._open.append(UndoGroup(label=label))

    def end_group(self) -> Optional[UndoGroup]:
        if not self._open:
            raise RuntimeError("end_group() called without a matching begin_group()")
        group = self._open.pop()
        self._coalescing_broken = True
        if not group.entries:
            return None
        if self._open:
            self._open[-1].entries.extend(group.entries)
        else:
            self._push(group)
        return group

    @property
    def in_group(self) -> bool:
        return bool(self._open)

    def break_coalescing(self) -> None:
        self._coalescing_broken = True

    def can_undo(self) -> bool:
        return self._index >= 0

    def can_redo(self) -> bool:
        return self._index < len(self._groups) - 1

    def undo(self) -> Optional[UndoGroup]:
        if not self.can_undo():
            return None
        group = self._groups[self._index]
        self._index -= 1
        self._coalescing_broken = True
        return group

    def redo(self) -> Optional[UndoGroup]:
        if not self.can_redo():
            return None
        self._index += 1
        self._coalescing_broken = True
        return self._groups[self._index]

    def clear(self) -> None:
        self._groups.clear()
        self._open.clear()
        self._index = -1
        self._coalescing_broken = True

    def __len__(self) -> int:
        return len(self._groups)


__all__ = ["EditLog", "UndoEntry", "UndoGroup"]
