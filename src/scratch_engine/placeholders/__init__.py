"""Placeholder units: model, markup rendering, and the buffer index."""

from .actions import (
    DEFAULT_POLICY,
    ReplacementAction,
    ReplacementPolicy,
    UserAction,
)
from .index import PlaceholderError, PlaceholderIndex
from .model import Placeholder, PlaceholderSyntax
from .render import UnrenderMode, render_placeholders, unrender

__all__ = [
    "DEFAULT_POLICY",
    "Placeholder",
    "PlaceholderError",
    "PlaceholderIndex",
    "PlaceholderSyntax",
    "ReplacementAction",
    "ReplacementPolicy",
    "UnrenderMode",
    "UserAction",
    "render_placeholders",
    "unrender",
]
