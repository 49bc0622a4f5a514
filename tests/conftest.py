from __future__ import annotations

from typing import Iterator

import pytest

from scratch_engine.runtime import telemetry


@pytest.fixture(autouse=True, scope="session")
def quiet_telemetry() -> Iterator[None]:
    telemetry.configure(preset="quiet")
    yield
