"""UI-agnostic text and structure synchronization engine for scratch paper editing."""

__all__ = [
    "actions",
    "adapters",
    "buffer",
    "config",
    "containers",
    "events",
    "highlight",
    "placeholders",
    "runtime",
    "session",
    "structure",
    "templates",
]

__version__ = "0.1.0"
