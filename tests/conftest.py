from __future__ import annotations

import sys
from datetime import time, timedelta, timezone
from pathlib import Path
from typing import Iterable

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from fastapi.testclient import TestClient

from solarclock.config import Coordinates, SolarClockConfig, SolarTargets

UTC_PLUS_ONE = timezone(timedelta(hours=1))
ALICANTE = Coordinates(latitude=38.34599467937726, longitude=-0.49068757240971655)
TARGETS = SolarTargets(sunrise=time(8, 0), transit=time(14, 0), sunset=time(20, 0))


@pytest.fixture
def alicante_config() -> SolarClockConfig:
    return SolarClockConfig(
        coordinates=ALICANTE,
        targets=TARGETS,
        reference_offset=UTC_PLUS_ONE,
    )


@pytest.fixture
def api_client(monkeypatch: pytest.MonkeyPatch) -> Iterable[TestClient]:
    for name in (
        "SOLAR_CLOCK_LAT",
        "SOLAR_CLOCK_LON",
        "SOLAR_CLOCK_OFFSET_HOURS",
        "SOLAR_CLOCK_SUNRISE",
        "SOLAR_CLOCK_TRANSIT",
        "SOLAR_CLOCK_SUNSET",
        "SOLAR_CLOCK_TRANSIT_STRATEGY",
    ):
        monkeypatch.delenv(name, raising=False)
    from solar_clock_api import app

    with TestClient(app) as client:
        yield client
