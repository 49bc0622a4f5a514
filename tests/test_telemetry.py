from __future__ import annotations

import pytest

from scratch_engine.runtime import telemetry


def test_configure_rejects_conflicting_arguments() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(config=object(), preset="quiet")
    with pytest.raises(ValueError):
        telemetry.configure(preset="verbose")


def test_span_reraises_and_keeps_metadata() -> None:
    with pytest.raises(RuntimeError):
        with telemetry.span("test::boom", metadata={"section": 3}) as handle:
            assert handle.metadata == {"section": "3"}
            handle.add_metadata("extra", [1, 2])
            raise RuntimeError("boom")

    assert handle.metadata["extra"] == "[1, 2]"


def test_loggers_are_cached_per_name() -> None:
    assert telemetry.get_logger("tests") is telemetry.get_logger("tests")


def test_record_event_accepts_levels() -> None:
    telemetry.record_event("test.event", level="debug", data={"ok": True})

    with pytest.raises(ValueError):
        telemetry.record_event("test.event", level="loud")
