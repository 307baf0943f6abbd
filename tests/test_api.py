from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

UTC_PLUS_ONE = timezone(timedelta(hours=1))


def test_health_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["reference_offset_hours"] == 1.0
    assert payload["transit_strategy"] == "hour_angle"


def test_health_reflects_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SOLAR_CLOCK_LAT", "40.4168")
    monkeypatch.setenv("SOLAR_CLOCK_LON", "-3.7038")
    from solar_clock_api import app

    with TestClient(app) as client:
        payload = client.get("/health").json()
    assert payload["latitude"] == pytest.approx(40.4168)
    assert payload["longitude"] == pytest.approx(-3.7038)


def test_clock_transit(api_client: TestClient) -> None:
    response = api_client.get("/clock", params={"at": "2026-02-03T13:15:43+01:00"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["status"] == "ok"
    assert payload["input_utc"] == "2026-02-03T12:15:43Z"
    assert payload["anchors"] == 9
    solar_time = datetime.fromisoformat(payload["solar_time"])
    assert solar_time.utcoffset() == timedelta(hours=1)
    expected = datetime(2026, 2, 3, 14, 0, tzinfo=UTC_PLUS_ONE)
    assert abs((solar_time - expected).total_seconds()) <= 2.0
    assert payload["delta_seconds"] == pytest.approx(2657.0, abs=2.0)


def test_clock_defaults_to_now(api_client: TestClient) -> None:
    response = api_client.get("/clock")
    assert response.status_code == 200
    input_utc = datetime.fromisoformat(response.json()["input_utc"].replace("Z", "+00:00"))
    assert abs((datetime.now(timezone.utc) - input_utc).total_seconds()) < 60.0


def test_clock_validation_error(api_client: TestClient) -> None:
    response = api_client.get("/clock", params={"lat": 95, "at": "2026-02-03T12:00:00Z"})
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["ok"] is False


def test_clock_polar_is_explicit_failure(api_client: TestClient) -> None:
    response = api_client.get(
        "/clock", params={"lat": 89, "lon": 0, "at": "2025-12-21T12:00:00Z"}
    )
    assert response.status_code == 422
    payload = response.json()
    assert payload["ok"] is False
    assert payload["code"] == "insufficient_data"


def test_clock_rejects_naive_instant(api_client: TestClient) -> None:
    response = api_client.get("/clock", params={"at": "2026-02-03T12:00:00"})
    assert response.status_code == 400
    assert response.json()["code"] == "http_400"


def test_clock_rejects_unordered_targets(api_client: TestClient) -> None:
    response = api_client.get(
        "/clock", params={"at": "2026-02-03T12:00:00Z", "sunrise": "15:00"}
    )
    assert response.status_code == 400


def test_clock_custom_schedule(api_client: TestClient) -> None:
    response = api_client.get(
        "/clock",
        params={
            "at": "2026-02-03T12:15:43Z",
            "sunrise": "06:00",
            "transit": "12:00",
            "sunset": "18:00",
            "offset_hours": 0,
        },
    )
    assert response.status_code == 200
    payload = response.json()
    solar_time = datetime.fromisoformat(payload["solar_time"])
    expected = datetime(2026, 2, 3, 12, 0, tzinfo=timezone.utc)
    assert abs((solar_time - expected).total_seconds()) <= 2.0
    assert payload["reference_offset_hours"] == 0.0


def test_events_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/events", params={"date": "2026-02-03"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["transit_utc"].startswith("2026-02-03T12:15:4")
    assert payload["sunrise_local"].startswith("2026-02-03T08:06:0")
    assert payload["sunset_local"].endswith("+01:00")


def test_events_polar_night(api_client: TestClient) -> None:
    response = api_client.get(
        "/events", params={"date": "2025-12-21", "lat": 78.2232, "lon": 15.6469}
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "no_horizon_crossing"
    assert payload["sunrise_utc"] is None
    assert payload["sunset_utc"] is None
    assert payload["transit_utc"] is not None


def test_clock_offset_out_of_range(api_client: TestClient) -> None:
    response = api_client.get(
        "/clock", params={"at": "2026-02-03T12:00:00Z", "offset_hours": 30}
    )
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_events_past_datetime_range(api_client: TestClient) -> None:
    response = api_client.get("/events", params={"date": "9999-12-31", "lon": -180})
    assert response.status_code == 422
    payload = response.json()
    assert payload["ok"] is False
    assert payload["code"] == "out_of_range"


def test_clock_on_last_representable_day(api_client: TestClient) -> None:
    response = api_client.get("/clock", params={"at": "9999-12-31T12:00:00Z"})
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
