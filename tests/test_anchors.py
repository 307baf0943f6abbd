from __future__ import annotations

from datetime import UTC, datetime, time, timedelta, timezone

import pytest

from solarclock.anchors import build_anchor_points, target_instant
from solarclock.config import Coordinates, EventKind
from solarclock.errors import InsufficientDataError

UTC_PLUS_ONE = timezone(timedelta(hours=1))


def test_window_covers_three_days(alicante_config):
    center = datetime(2026, 2, 3, 12, 0, tzinfo=UTC)
    points = build_anchor_points(
        center,
        alicante_config.coordinates,
        alicante_config.targets,
        alicante_config.reference_offset,
    )
    assert len(points) == 9
    assert [point.kind for point in points] == [
        EventKind.sunrise,
        EventKind.transit,
        EventKind.sunset,
    ] * 3
    xs = [point.x for point in points]
    assert all(a < b for a, b in zip(xs, xs[1:]))
    assert xs[0] < center.timestamp() < xs[-1]


def test_anchor_delta_is_target_minus_event(alicante_config):
    center = datetime(2026, 2, 3, 12, 0, tzinfo=UTC)
    points = build_anchor_points(
        center,
        alicante_config.coordinates,
        alicante_config.targets,
        alicante_config.reference_offset,
    )
    sunrise = points[3]
    assert sunrise.kind is EventKind.sunrise
    # Real sunrise 07:06:06 UTC, target 08:00 at UTC+1 is 07:00 UTC.
    assert sunrise.y == pytest.approx(-366.0, abs=2.0)
    target = datetime(2026, 2, 3, 7, 0, tzinfo=UTC).timestamp()
    assert sunrise.x + sunrise.y == pytest.approx(target, abs=1e-6)


def test_target_uses_reference_offset_calendar_date():
    event = datetime(2026, 2, 3, 23, 30, tzinfo=UTC)
    target = target_instant(event, time(14, 0), UTC_PLUS_ONE)
    assert target == datetime(2026, 2, 4, 13, 0, tzinfo=UTC)
    assert target.tzinfo is UTC


def test_same_instant_in_any_offset_builds_same_anchors(alicante_config):
    a = datetime(2026, 3, 29, 2, 0, tzinfo=UTC_PLUS_ONE)
    b = datetime(2026, 3, 29, 3, 0, tzinfo=timezone(timedelta(hours=2)))
    args = (
        alicante_config.coordinates,
        alicante_config.targets,
        alicante_config.reference_offset,
    )
    assert build_anchor_points(a, *args) == build_anchor_points(b, *args)


@pytest.mark.parametrize("month", [6, 12])
def test_polar_window_is_insufficient(alicante_config, month):
    with pytest.raises(InsufficientDataError):
        build_anchor_points(
            datetime(2025, month, 21, 12, 0, tzinfo=UTC),
            Coordinates(latitude=89.0, longitude=0.0),
            alicante_config.targets,
            alicante_config.reference_offset,
        )


def test_naive_center_rejected(alicante_config):
    with pytest.raises(ValueError):
        build_anchor_points(
            datetime(2026, 2, 3, 12, 0),
            alicante_config.coordinates,
            alicante_config.targets,
            alicante_config.reference_offset,
        )


@pytest.mark.parametrize(
    "center",
    [datetime(9999, 12, 31, 12, 0, tzinfo=UTC), datetime(1, 1, 1, 12, 0, tzinfo=UTC)],
)
def test_window_drops_unrepresentable_day(alicante_config, center):
    points = build_anchor_points(
        center,
        alicante_config.coordinates,
        alicante_config.targets,
        alicante_config.reference_offset,
    )
    assert len(points) == 6
    assert all(abs(point.x - center.timestamp()) < 2 * 86400 for point in points)
