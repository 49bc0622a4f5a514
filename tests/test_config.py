from __future__ import annotations

import pytest

from scratch_engine.config import EngineConfig
from scratch_engine.placeholders import PlaceholderSyntax
from scratch_engine.runtime.telemetry import TelemetrySettings


def test_defaults_without_environment() -> None:
    assert EngineConfig.from_env({}) == EngineConfig()
    assert EngineConfig().output_syntax is PlaceholderSyntax.CANONICAL


def test_environment_overrides() -> None:
    config = EngineConfig.from_env(
        {
            "SCRATCH_ENGINE_LEGACY_PLACEHOLDERS": "1",
            "SCRATCH_ENGINE_TAB_LOOKAHEAD": "2",
            "SCRATCH_ENGINE_LINE_TO_LINE": "yes",
            "SCRATCH_ENGINE_LIVE_RENDER": "off",
            "SCRATCH_ENGINE_BLANK_MARKER": "_",
        }
    )

    assert config.syntaxes == (PlaceholderSyntax.CANONICAL, PlaceholderSyntax.LEGACY)
    assert config.tab_lookahead == 2
    assert config.line_to_line is True
    assert config.live_render is False
    assert config.blank_marker == "_"
    assert config.trailing_newline is True


def test_process_environment_is_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCRATCH_ENGINE_DIRTY_TRACKING", "false")

    assert EngineConfig.from_env().dirty_tracking is False


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(ValueError):
        EngineConfig.from_env({"SCRATCH_ENGINE_TAB_LOOKAHEAD": "soon"})
    with pytest.raises(ValueError):
        EngineConfig(blank_marker="ab")
    with pytest.raises(ValueError):
        EngineConfig(syntaxes=())
    with pytest.raises(ValueError):
        EngineConfig(separator="")


def test_with_overrides_returns_copy() -> None:
    base = EngineConfig()

    changed = base.with_overrides(line_to_line=True)

    assert changed.line_to_line and not base.line_to_line


def test_telemetry_settings_from_environment() -> None:
    settings = TelemetrySettings.from_env(
        {
            "SCRATCH_ENGINE_LOG_LEVEL": "debug",
            "SCRATCH_ENGINE_DISABLE_CONSOLE": "1",
            "SCRATCH_ENGINE_LOG_BUFFERED": "true",
            "SCRATCH_ENGINE_LOG_BUFFER_SIZE": "16",
        }
    )

    assert settings.level == "DEBUG"
    assert settings.console is False
    assert settings.buffered is True
    assert settings.buffer_size == 16
    assert TelemetrySettings.from_env({}) == TelemetrySettings()


def test_telemetry_settings_reject_bad_buffer_size() -> None:
    with pytest.raises(ValueError):
        TelemetrySettings.from_env({"SCRATCH_ENGINE_LOG_BUFFER_SIZE": "big"})
