"""User gestures on a placeholder and how they resolve into buffer edits."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional

from .model import Placeholder


class UserAction(str, Enum):
    DELETE = "delete"
    ENTER = "enter"
    DOUBLE_CLICK = "double_click"


class ReplacementAction(str, Enum):
    DELETE = "delete"
    INSERT = "insert"
    NONE = "none"


PolicyHook = Callable[[UserAction, Placeholder], Optional[ReplacementAction]]


@dataclass(slots=True)
class ReplacementPolicy:
    """Maps a user action to a replacement action.

    ``hook`` may answer first for a given placeholder; a ``None`` answer
    falls back to ``rules`` and then to ``fallback``.
    """

    rules: Dict[UserAction, ReplacementAction] = field(
        default_factory=lambda: {UserAction.DELETE: ReplacementAction.DELETE}
    )
    fallback: ReplacementAction = ReplacementAction.INSERT
    hook: Optional[PolicyHook] = None

    def resolve(self, action: UserAction, placeholder: Placeholder) -> ReplacementAction:
        if self.hook is not None:
            decided = self.hook(action, placeholder)
            if decided is not None:
                return decided
        return self.rules.get(action, self.fallback)


DEFAULT_POLICY = ReplacementPolicy()

__all__ = [
    "DEFAULT_POLICY",
    "PolicyHook",
    "ReplacementAction",
    "ReplacementPolicy",
    "UserAction",
]
