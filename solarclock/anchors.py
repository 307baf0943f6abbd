"""Anchor points pairing observed solar events with their target clock times."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, time, timedelta, timezone
from typing import List

from .config import Coordinates, EventKind, SolarTargets
from .errors import InsufficientDataError
from .solar import compute_solar_events
from .transit import apply_transit_strategy

__all__ = ["AnchorPoint", "WINDOW_DAY_OFFSETS", "build_anchor_points", "target_instant"]

WINDOW_DAY_OFFSETS = (-1, 0, 1)


@dataclass(frozen=True)
class AnchorPoint:
    """Interpolation node: ``x`` is POSIX seconds, ``y`` the target minus real delta."""

    x: float
    y: float
    kind: EventKind


def target_instant(event: datetime, target: time, reference_offset: timezone) -> datetime:
    """Return *target* on the reference-offset calendar date of *event*, in UTC."""

    local_date = event.astimezone(reference_offset).date()
    return datetime.combine(local_date, target, tzinfo=reference_offset).astimezone(UTC)


def build_anchor_points(
    center: datetime,
    coordinates: Coordinates,
    targets: SolarTargets,
    reference_offset: timezone,
    transit_strategy: str = "hour_angle",
) -> List[AnchorPoint]:
    """Collect anchors for the UTC days before, of and after *center*.

    Raises
    ------
    InsufficientDataError
        If fewer than two anchors exist, or no sunrise or sunset occurs in the
        whole window.
    """

    if center.tzinfo is None:
        raise ValueError("center must be timezone-aware")
    center_utc = center.astimezone(UTC)

    points: List[AnchorPoint] = []
    horizon_crossings = 0
    for day_offset in WINDOW_DAY_OFFSETS:
        # Days or events past the ends of the datetime range contribute no anchors.
        try:
            day = (center_utc + timedelta(days=day_offset)).date()
            events = compute_solar_events(day, coordinates.latitude, coordinates.longitude)
            events = apply_transit_strategy(events, coordinates, transit_strategy)
        except OverflowError:
            continue
        if events.has_horizon_crossing:
            horizon_crossings += 1
        for kind, real in events.events():
            try:
                target = target_instant(real, targets.for_event(kind), reference_offset)
            except OverflowError:
                continue
            x = real.timestamp()
            points.append(AnchorPoint(x=x, y=target.timestamp() - x, kind=kind))

    if len(points) < 2 or horizon_crossings == 0:
        raise InsufficientDataError(
            f"{len(points)} anchors and {horizon_crossings} horizon crossings "
            f"around {center_utc.date().isoformat()} at "
            f"({coordinates.latitude}, {coordinates.longitude})"
        )

    points.sort(key=lambda point: point.x)
    return points
