"""Engine configuration resolved from defaults and ``SCRATCH_ENGINE_*`` variables."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Tuple

from scratch_engine.placeholders.model import PlaceholderSyntax
from scratch_engine.runtime.telemetry import ENV_PREFIX, _env, _env_flag

DEFAULT_SEPARATOR = "\n\n"


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Behaviour switches shared by every component of a session.

    ``syntaxes`` lists the placeholder notations recognised when loading
    source text; the first one is used when writing placeholders back out.
    """

    separator: str = DEFAULT_SEPARATOR
    syntaxes: Tuple[PlaceholderSyntax, ...] = (PlaceholderSyntax.CANONICAL,)
    blank_marker: str = " "
    trailing_newline: bool = True
    live_render: bool = True
    line_to_line: bool = False
    dirty_tracking: bool = True
    tab_lookahead: int = 0

    def __post_init__(self) -> None:
        if not self.separator:
            raise ValueError("separator cannot be empty")
        if not self.syntaxes:
            raise ValueError("at least one placeholder syntax must be enabled")
        if len(self.blank_marker) != 1:
            raise ValueError("blank_marker must be a single character")
        if self.tab_lookahead < 0:
            raise ValueError("tab_lookahead cannot be negative")

    @property
    def output_syntax(self) -> PlaceholderSyntax:
        return self.syntaxes[0]

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        defaults = cls()
        syntaxes: Tuple[PlaceholderSyntax, ...] = (PlaceholderSyntax.CANONICAL,)
        if _env_flag("LEGACY_PLACEHOLDERS", False, environ=environ):
            syntaxes += (PlaceholderSyntax.LEGACY,)
        raw_lookahead = _env("TAB_LOOKAHEAD", environ=environ) or str(defaults.tab_lookahead)
        try:
            lookahead = int(raw_lookahead)
        except ValueError:
            raise ValueError(
                f"{ENV_PREFIX}TAB_LOOKAHEAD must be an integer, got {raw_lookahead!r}"
            ) from None
        return cls(
            syntaxes=syntaxes,
            blank_marker=_env("BLANK_MARKER", environ=environ) or defaults.blank_marker,
            trailing_newline=_env_flag(
                "TRAILING_NEWLINE", defaults.trailing_newline, environ=environ
            ),
            live_render=_env_flag("LIVE_RENDER", defaults.live_render, environ=environ),
            line_to_line=_env_flag("LINE_TO_LINE", defaults.line_to_line, environ=environ),
            dirty_tracking=_env_flag(
                "DIRTY_TRACKING", defaults.dirty_tracking, environ=environ
            ),
            tab_lookahead=lookahead,
        )

    def with_overrides(self, **changes: Any) -> "EngineConfig":
        return replace(self, **changes)


__all__ = ["DEFAULT_SEPARATOR", "EngineConfig"]
