"""Selection and viewport state tied to a buffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .ranges import TextRange


@dataclass(slots=True)
class SelectionState:
    """Mutable caret/selection info plus the host's visible range."""

    selected_range: TextRange = TextRange(0, 0)
    visible_range: Optional[TextRange] = None
    last_change_version: int = 0

    @property
    def caret(self) -> int:
        return self.selected_range.location

    def set_selection(self, selected: TextRange) -> None:
        self.selected_range = selected

    def set_caret(self, location: int) -> None:
        self.selected_range = TextRange(location, 0)

    def set_visible_range(self, visible: Optional[TextRange]) -> None:
        self.visible_range = visible
