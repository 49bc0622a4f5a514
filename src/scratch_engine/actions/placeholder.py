"""Key and pointer handling for placeholder units.

Each handler either consumes the input (the engine edited or selected
something) or lets it fall through so the host performs its default
behaviour for the key.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, Optional

from scratch_engine.buffer import TextRange
from scratch_engine.placeholders import Placeholder, UserAction
from scratch_engine.runtime import telemetry
from scratch_engine.session import EditorSession


@dataclass(slots=True)
class ActionResult:
    """Result returned from a key or click handler."""

    consumed: bool
    status: str = "ok"
    message: Optional[str] = None


KeyHandler = Callable[[EditorSession], ActionResult]


def _passed() -> ActionResult:
    return ActionResult(consumed=False, status="pass")


def _selected_result(session: EditorSession, placeholder: Placeholder, status: str) -> ActionResult:
    session.select_placeholder(placeholder)
    return ActionResult(consumed=True, status=status, message=placeholder.label)


def _preceding(session: EditorSession, location: int) -> Optional[Placeholder]:
    ordered = session.placeholders.placeholders
    before = [p for p, unit in ordered.items() if unit.location < location]
    if before:
        return before[-1]
    return ordered.key_at(len(ordered) - 1)


def insert_tab(session: EditorSession, *, reverse: bool = False) -> ActionResult:
    index = session.placeholders
    selected = index.selected
    if selected is not None:
        target = index.previous(selected) if reverse else index.next(selected)
        if target is not None:
            status = "placeholder_previous" if reverse else "placeholder_next"
            return _selected_result(session, target, status)
    caret = session.buffer.selection.location
    if reverse:
        target = _preceding(session, caret)
    else:
        section = session.section_range_at(caret)
        start = section.location if section is not None else caret
        target = index.nearest_from(start, lookahead=session.config.tab_lookahead)
    if target is None:
        return _passed()
    return _selected_result(session, target, "placeholder_nearest")


def _act_on_selected(session: EditorSession, action: UserAction) -> ActionResult:
    selected = session.placeholders.selected
    if selected is None:
        return _passed()
    resolved = session.placeholders.perform(selected, action, session.policy)
    return ActionResult(
        consumed=True, status=f"placeholder_{resolved.value}", message=selected.label
    )


def move_left(session: EditorSession) -> ActionResult:
    if session.placeholders.selected is not None:
        session.deselect_placeholder()
        return _passed()
    selection = session.buffer.selection
    if selection.is_empty:
        neighbour = session.placeholders.placeholder_at(selection.location - 1)
        if neighbour is not None:
            return _selected_result(session, neighbour, "placeholder_adjacent")
    return _passed()


def move_right(session: EditorSession) -> ActionResult:
    if session.placeholders.selected is not None:
        session.deselect_placeholder()
        return _passed()
    selection = session.buffer.selection
    if selection.is_empty:
        neighbour = session.placeholders.placeholder_at(selection.location)
        if neighbour is not None:
            return _selected_result(session, neighbour, "placeholder_adjacent")
    return _passed()


_KEY_HANDLERS: Dict[str, KeyHandler] = {
    "tab": insert_tab,
    "shift+tab": partial(insert_tab, reverse=True),
    "enter": partial(_act_on_selected, action=UserAction.ENTER),
    "backspace": partial(_act_on_selected, action=UserAction.DELETE),
    "ctrl+backspace": partial(_act_on_selected, action=UserAction.DELETE),
    "delete": partial(_act_on_selected, action=UserAction.DELETE),
    "left": move_left,
    "right": move_right,
}


def handle_key(session: EditorSession, key: str) -> ActionResult:
    handler = _KEY_HANDLERS.get(key.strip().lower())
    if handler is None:
        return _passed()
    result = handler(session)
    if result.consumed:
        telemetry.record_event(
            "placeholder.key",
            level="debug",
            data={"key": key, "status": result.status},
        )
    return result


def click(session: EditorSession, location: int, click_count: int = 1) -> ActionResult:
    """Pointer press at ``location``: select a placeholder, or act on a double click."""

    placeholder = session.placeholders.placeholder_at(location)
    if placeholder is None:
        session.deselect_placeholder()
        session.on_selection_changed(TextRange(location, 0))
        return _passed()
    if placeholder != session.placeholders.selected:
        return _selected_result(session, placeholder, "placeholder_selected")
    if click_count > 1:
        return _act_on_selected(session, UserAction.DOUBLE_CLICK)
    return ActionResult(consumed=True, status="placeholder_selected", message=placeholder.label)


__all__ = [
    "ActionResult",
    "KeyHandler",
    "click",
    "handle_key",
    "insert_tab",
    "move_left",
    "move_right",
]
