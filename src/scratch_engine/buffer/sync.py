"""Adapter boundary types for syncing buffers with host widgets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from .ranges import TextRange

if TYPE_CHECKING:
    from .document import EditDelta


@dataclass(slots=True)
class BufferMirror:
    """Host-friendly snapshot describing the current buffer state."""

    text: str
    selection: TextRange
    version: int
    attributes: dict[str, str] = field(default_factory=dict)


class BufferSync(Protocol):
    """Protocol describing how adapters exchange data with the buffer layer."""

    def pull_buffer(self) -> BufferMirror:
        """Return the latest buffer snapshot that the host should render."""
        ...

    def push_host_edit(self, delta: "EditDelta") -> "EditDelta":
        """Submit an edit made in the host widget; returns the edit as applied."""
        ...


class BufferValidationError(RuntimeError):
    """Raised when a host passes a location or range outside the buffer."""

    def __init__(
        self,
        message: str,
        *,
        location: int | None = None,
        text_range: TextRange | None = None,
    ) -> None:
        super().__init__(message)
        self.location = location
        self.text_range = text_range
