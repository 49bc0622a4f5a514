"""Text storage, selection state, and undo/redo data structures."""

from .buffer import Buffer, EditListener, Transaction
from .document import ATTACHMENT_CHARACTER, AttributedText, EditDelta, TextStorage
from .ranges import TextRange, aggregate
from .state import SelectionState
from .sync import BufferMirror, BufferSync, BufferValidationError
from .undo import EditLog, UndoEntry, UndoGroup
from .validation import ensure_location, ensure_range

__all__ = [
    "ATTACHMENT_CHARACTER",
    "AttributedText",
    "EditDelta",
    "TextStorage",
    "TextRange",
    "aggregate",
    "SelectionState",
    "EditLog",
    "UndoEntry",
    "UndoGroup",
    "Buffer",
    "EditListener",
    "Transaction",
    "BufferMirror",
    "BufferSync",
    "BufferValidationError",
    "ensure_location",
    "ensure_range",
]
