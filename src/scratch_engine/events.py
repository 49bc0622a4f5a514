"""Event channel the session uses to talk to its host."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

EventCallback = Callable[[object], None]

OUTLINE_UPDATED = "outline.updated"
OUTLINE_SELECT = "outline.select"
RENDER_REVEAL = "render.reveal"
RENDER_SCROLL_LINE = "render.scroll_line"
RENDER_UPDATE = "render.update"
HIGHLIGHT_APPLY = "highlight.apply"
PLACEHOLDER_SELECTED = "placeholder.selected"


@dataclass(slots=True)
class Emitted:
    event: str
    payload: object


class EventChannel:
    """Minimal event bus owned by one session."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[EventCallback]] = {}
        self._wildcard: List[Callable[[str, object], None]] = []

    def subscribe(self, event: str, callback: EventCallback) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def unsubscribe(self, event: str, callback: EventCallback) -> None:
        callbacks = self._subscribers.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def subscribe_all(self, callback: Callable[[str, object], None]) -> None:
        self._wildcard.append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in list(self._subscribers.get(event, [])):
            callback(payload)
        for callback in list(self._wildcard):
            callback(event, payload)


class EventRecorder:
    """Collects every event emitted on a channel; handy for hosts and tests."""

    def __init__(self, channel: EventChannel) -> None:
        self.events: List[Emitted] = []
        channel.subscribe_all(self._record)

    def _record(self, event: str, payload: object) -> None:
        self.events.append(Emitted(event, payload))

    def named(self, event: str) -> List[object]:
        return [item.payload for item in self.events if item.event == event]

    def clear(self) -> None:
        self.events.clear()


__all__ = [
    "EventCallback",
    "EventChannel",
    "EventRecorder",
    "Emitted",
    "HIGHLIGHT_APPLY",
    "OUTLINE_SELECT",
    "OUTLINE_UPDATED",
    "PLACEHOLDER_SELECTED",
    "RENDER_REVEAL",
    "RENDER_SCROLL_LINE",
    "RENDER_UPDATE",
]
