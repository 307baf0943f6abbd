"""High-precision solar transit by minimising the solar zenith angle."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from typing import Callable, Dict, Tuple

import erfa
import numpy as np

from .config import Coordinates
from .solar import SolarEventSet

__all__ = [
    "REFINE_WINDOW_SECONDS",
    "apply_transit_strategy",
    "golden_section_minimize",
    "refine_transit",
    "solar_zenith_degrees",
]

LOGGER = logging.getLogger(__name__)

AU_KM = 149597870.700
REFINE_WINDOW_SECONDS = 20 * 60.0
REFINE_TOLERANCE_SECONDS = 1e-6

_INV_PHI = (math.sqrt(5.0) - 1.0) / 2.0


@dataclass(frozen=True)
class _TimeScales:
    """Two-part Julian dates of a UTC instant."""

    ut1: Tuple[float, float]
    tt: Tuple[float, float]


def _datetime_to_timescales(dt: datetime) -> _TimeScales:
    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    dt_utc = dt.astimezone(UTC)
    utc1, utc2 = erfa.dtf2d(
        "UTC",
        dt_utc.year,
        dt_utc.month,
        dt_utc.day,
        dt_utc.hour,
        dt_utc.minute,
        dt_utc.second + dt_utc.microsecond / 1_000_000,
    )
    tai1, tai2 = erfa.utctai(utc1, utc2)
    tt1, tt2 = erfa.taitt(tai1, tai2)
    ut11, ut12 = erfa.utcut1(utc1, utc2, 0.0)
    return _TimeScales(ut1=(float(ut11), float(ut12)), tt=(float(tt1), float(tt2)))


def _site_frame(lat_rad: float, lon_rad: float) -> Tuple[np.ndarray, np.ndarray]:
    """Return the WGS84 site position (km) and its local zenith unit vector, ITRS."""

    position_m = np.array(erfa.gd2gc(erfa.WGS84, lon_rad, lat_rad, 0.0), dtype=float)
    up = np.array(
        [
            math.cos(lat_rad) * math.cos(lon_rad),
            math.cos(lat_rad) * math.sin(lon_rad),
            math.sin(lat_rad),
        ]
    )
    return position_m / 1000.0, up


def solar_zenith_degrees(dt: datetime, latitude: float, longitude: float) -> float:
    """Topocentric geometric zenith angle of the sun at *dt* for the given site."""

    times = _datetime_to_timescales(dt)
    pvh, _ = erfa.epv00(*times.tt)
    sun_gcrs = -np.asarray(pvh["p"], dtype=float) * AU_KM
    rotation = np.array(erfa.c2t06a(*times.tt, *times.ut1, 0.0, 0.0), dtype=float)
    site_vector, site_up = _site_frame(math.radians(latitude), math.radians(longitude))
    topocentric = rotation @ sun_gcrs - site_vector
    norm = np.linalg.norm(topocentric)
    if norm == 0:
        raise ValueError("Degenerate topocentric vector encountered")
    cos_zenith = float(np.clip(np.dot(topocentric / norm, site_up), -1.0, 1.0))
    return math.degrees(math.acos(cos_zenith))


def _objective_value(objective: Callable[[float], float], x: float) -> float:
    try:
        value = float(objective(x))
    except (ArithmeticError, ValueError, erfa.ErfaError):
        return math.inf
    return value if math.isfinite(value) else math.inf


def golden_section_minimize(
    objective: Callable[[float], float],
    lower: float,
    upper: float,
    tolerance: float = REFINE_TOLERANCE_SECONDS,
    max_iterations: int = 200,
) -> float:
    """Locate the minimum of a unimodal *objective* on ``[lower, upper]``.

    Points where the objective raises a numerical error or returns a
    non-finite value are scored as ``+inf``. Returns the midpoint of the final
    bracket once it is narrower than *tolerance*.
    """

    if not upper > lower:
        raise ValueError(f"empty search interval: [{lower}, {upper}]")
    if tolerance <= 0:
        raise ValueError("tolerance must be positive")

    low, high = lower, upper
    left = high - _INV_PHI * (high - low)
    right = low + _INV_PHI * (high - low)
    f_left = _objective_value(objective, left)
    f_right = _objective_value(objective, right)

    for _ in range(max_iterations):
        if high - low <= tolerance:
            break
        if f_left <= f_right:
            high, right, f_right = right, left, f_left
            left = high - _INV_PHI * (high - low)
            f_left = _objective_value(objective, left)
        else:
            low, left, f_left = left, right, f_right
            right = low + _INV_PHI * (high - low)
            f_right = _objective_value(objective, right)
    return low + (high - low) / 2.0


def refine_transit(
    approximate: datetime,
    coordinates: Coordinates,
    window_seconds: float = REFINE_WINDOW_SECONDS,
    tolerance: float = REFINE_TOLERANCE_SECONDS,
) -> datetime:
    """Return the instant of minimum zenith angle within ±*window_seconds*."""

    def zenith_at(offset: float) -> float:
        return solar_zenith_degrees(
            approximate + timedelta(seconds=offset),
            coordinates.latitude,
            coordinates.longitude,
        )

    offset = golden_section_minimize(zenith_at, -window_seconds, window_seconds, tolerance)
    refined = approximate + timedelta(seconds=offset)
    LOGGER.debug(
        json.dumps(
            {
                "event": "transit_refined",
                "approximate": approximate.isoformat(),
                "refined": refined.isoformat(),
                "shift_s": round(offset, 6),
            }
        )
    )
    return refined


def _hour_angle_transit(events: SolarEventSet, coordinates: Coordinates) -> SolarEventSet:
    """Identity tier: keep the closed-form hour-angle transit."""

    return events


def _zenith_minimum_transit(events: SolarEventSet, coordinates: Coordinates) -> SolarEventSet:
    return replace(events, transit=refine_transit(events.transit, coordinates))


_STRATEGIES: Dict[str, Callable[[SolarEventSet, Coordinates], SolarEventSet]] = {
    "hour_angle": _hour_angle_transit,
    "zenith_minimum": _zenith_minimum_transit,
}


def apply_transit_strategy(
    events: SolarEventSet, coordinates: Coordinates, strategy: str
) -> SolarEventSet:
    """Return *events* with the transit computed by the named strategy."""

    try:
        resolver = _STRATEGIES[strategy]
    except KeyError as exc:
        raise ValueError(f"Unsupported transit strategy: {strategy}") from exc
    return resolver(events, coordinates)
