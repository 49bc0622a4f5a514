"""Telemetry services for the synchronization engine, built on telelog.

The rest of the engine only touches four entry points:

``configure(...)`` -- adopt an explicit telelog config or a named preset
``get_logger(name)`` -- fetch (and cache) a configured logger
``record_event(name, ...)`` -- emit a structured event at a chosen level
``span(name, ...)`` -- profile a block and optionally track it as a component

Settings are read from ``SCRATCH_ENGINE_*`` environment variables through
:class:`TelemetrySettings` so hosts and tests can build them explicitly.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, MutableMapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "SCRATCH_ENGINE_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "scratch_engine")

_LOGGER_CACHE: MutableMapping[str, Any] = {}
_ACTIVE_CONFIG: Optional[Any] = None

_TRUTHY = {"1", "true", "yes", "on"}


def _env(
    name: str, default: Optional[str] = None, *, environ: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    source = os.environ if environ is None else environ
    return source.get(f"{ENV_PREFIX}{name}", default)


def _env_flag(
    name: str, default: bool, *, environ: Optional[Mapping[str, str]] = None
) -> bool:
    raw = _env(name, environ=environ)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _format_pairs(data: Dict[str, Any]) -> list[tuple[str, str]]:
    return [(str(key), _stringify(value)) for key, value in data.items()]


@dataclass(slots=True)
class TelemetrySettings:
    """Environment-derived knobs applied to the default telelog config."""

    level: str = "INFO"
    console: bool = True
    colored: bool = True
    json_format: bool = False
    log_file: str = ""
    buffered: bool = False
    buffer_size: int = 2048

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TelemetrySettings":
        raw_size = _env("LOG_BUFFER_SIZE", environ=environ) or "2048"
        try:
            buffer_size = int(raw_size)
        except ValueError:
            raise ValueError(
                f"{ENV_PREFIX}LOG_BUFFER_SIZE must be an integer, got {raw_size!r}"
            ) from None
        return cls(
            level=(_env("LOG_LEVEL", environ=environ) or "INFO").upper(),
            console=not _env_flag("DISABLE_CONSOLE", False, environ=environ),
            colored=not _env_flag("NO_COLOR", False, environ=environ),
            json_format=_env_flag("LOG_JSON", False, environ=environ),
            log_file=_env("LOG_FILE", "", environ=environ) or "",
            buffered=_env_flag("LOG_BUFFERED", False, environ=environ),
            buffer_size=buffer_size,
        )

    def build(self) -> Any:
        config = tl.Config()
        config.with_min_level(self.level)
        config.with_console_output(self.console)
        if self.console:
            config.with_colored_output(self.colored)
        if self.json_format:
            config.with_json_format(True)
        if self.log_file:
            config.with_file_output(self.log_file)
        if self.buffered:
            config.with_buffering(True)
            config.with_buffer_size(self.buffer_size)
        return _apply_engine_overrides(config)


def _apply_engine_overrides(config: Any) -> Any:
    """Spans rely on ``logger.profile`` so profiling always stays on."""

    config.with_profiling(True)
    return config


def _build_preset_config(preset: str) -> Any:
    key = preset.lower()
    if key == "development":
        settings = TelemetrySettings(level="DEBUG")
    elif key == "production":
        settings = TelemetrySettings(
            console=False,
            log_file=_env("LOG_FILE") or "scratch_engine.log",
            buffered=True,
        )
    elif key in {"quiet", "test"}:
        settings = TelemetrySettings(level="WARNING", console=False)
    else:
        raise ValueError(f"Unknown preset '{preset}'.")
    return settings.build()


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Replace the active telelog configuration.

    Parameters
    ----------
    config:
        Explicit ``tl.Config`` instance to adopt.
    preset:
        ``"development"``, ``"production"`` or ``"quiet"``. ``config`` and
        ``preset`` are mutually exclusive.
    """

    global _ACTIVE_CONFIG
    if config and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")

    if preset:
        config = _build_preset_config(preset)
    elif config is None:
        config = TelemetrySettings.from_env().build()

    _ACTIVE_CONFIG = _apply_engine_overrides(config)
    _LOGGER_CACHE.clear()


def _ensure_config() -> Any:
    global _ACTIVE_CONFIG
    if _ACTIVE_CONFIG is None:
        _ACTIVE_CONFIG = TelemetrySettings.from_env().build()
    return _ACTIVE_CONFIG


def get_logger(name: Optional[str] = None) -> Any:
    """Return a cached ``telelog.Logger`` bound to the active config."""

    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name not in _LOGGER_CACHE:
        _LOGGER_CACHE[logger_name] = tl.Logger.with_config(
            logger_name, _ensure_config()
        )
    return _LOGGER_CACHE[logger_name]


def _resolve_level_method(
    logger: Any, level: Any, *, expect_data: bool = False
) -> Tuple[Any, bool]:
    name = str(level).lower()
    if expect_data:
        with_attr = getattr(logger, f"{name}_with", None)
        if with_attr is not None:
            return with_attr, True

    attr = getattr(logger, name, None)
    if attr is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    return attr, False


def record_event(
    name: str,
    *,
    level: str | Any = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit ``event::<name>`` with ``data`` as structured pairs."""

    log = get_logger(logger_name)
    payload = {"event": name, **(data or {})}
    method, accepts_data = _resolve_level_method(log, level, expect_data=True)
    message = f"event::{name}"
    if accepts_data:
        method(message, _format_pairs(payload))
    else:
        method(f"{message} {payload}")


@dataclass
class SpanHandle:
    """Handle yielded by ``span`` for metadata updates and failure reports."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def _emit(
        self, level: str, message: str, extra: Optional[Dict[str, Any]] = None
    ) -> None:
        payload = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        if extra:
            payload.update({key: _stringify(val) for key, val in extra.items()})

        method, accepts = _resolve_level_method(self.logger, level, expect_data=True)
        if accepts:
            method(message, _format_pairs(payload))
        else:
            method(f"{message} {payload}")

    def fail(self, reason: str) -> None:
        self._emit("error", "span::fail", {"reason": reason})

    def note(self, message: str, **extra: Any) -> None:
        self._emit("debug", f"span::{message}", extra or None)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a code block and (optionally) track it as a component.

    ``component=True`` reuses ``name`` as the component identifier, a string
    names it explicitly. ``metadata`` is pushed as logger context for the
    duration of the block and copied onto the handle.
    """

    log = get_logger(logger_name)
    component_name = None
    if component is True:
        component_name = name
    elif isinstance(component, str):
        component_name = component

    context_keys = []
    metadata_payload: Dict[str, Any] = {}
    if metadata:
        for key, value in metadata.items():
            serialized = _stringify(value)
            metadata_payload[key] = serialized
            log.add_context(key, serialized)
            context_keys.append(key)

    with ExitStack() as stack:
        if component_name:
            stack.enter_context(log.track_component(component_name))

        stack.enter_context(log.profile(name))
        handle = SpanHandle(
            logger=log,
            span_name=name,
            component_name=component_name,
            metadata=dict(metadata_payload),
        )

        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise
        finally:
            for key in context_keys:
                log.remove_context(key)


configure()
logger = get_logger()

__all__ = [
    "ENV_PREFIX",
    "SpanHandle",
    "TelemetrySettings",
    "configure",
    "get_logger",
    "record_event",
    "span",
    "logger",
]
