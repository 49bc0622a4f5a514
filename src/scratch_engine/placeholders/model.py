"""Placeholder units and the markup syntaxes they are parsed from."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class PlaceholderSyntax(str, Enum):
    """Markup notations for a placeholder token in source text."""

    CANONICAL = "canonical"
    LEGACY = "legacy"

    @property
    def opener(self) -> str:
        return "<#" if self is PlaceholderSyntax.CANONICAL else "<@"

    @property
    def closer(self) -> str:
        return "#>" if self is PlaceholderSyntax.CANONICAL else "@>"

    @property
    def pattern(self) -> str:
        """Regex with one group for the label; labels never span lines."""

        return f"{re.escape(self.opener)}(.*?){re.escape(self.closer)}"

    def markup(self, label: str) -> str:
        return f"{self.opener}{label}{self.closer}"


@dataclass(eq=False, slots=True)
class Placeholder:
    """A structured fill-in marker occupying one unit of the buffer.

    Equality and hashing follow ``identity`` so two placeholders with the
    same label stay distinct.
    """

    label: str
    replacement: Optional[str] = None
    identity: uuid.UUID = field(default_factory=uuid.uuid4)
    is_selected: bool = False

    @property
    def text(self) -> str:
        return self.replacement if self.replacement is not None else self.label

    def markup(self, syntax: PlaceholderSyntax = PlaceholderSyntax.CANONICAL) -> str:
        return syntax.markup(self.label)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Placeholder):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def __repr__(self) -> str:
        return f"Placeholder({self.label!r}, id={str(self.identity)[:8]})"


__all__ = ["Placeholder", "PlaceholderSyntax"]
