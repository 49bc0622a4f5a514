"""Editing verbs the host forwards keys and clicks to."""

from .placeholder import ActionResult, click, handle_key, insert_tab, move_left, move_right

__all__ = [
    "ActionResult",
    "click",
    "handle_key",
    "insert_tab",
    "move_left",
    "move_right",
]
