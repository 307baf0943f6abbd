"""Closed-form sunrise, solar transit and sunset times."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Iterator, Optional, Tuple

from .config import EventKind

__all__ = [
    "SolarEventSet",
    "compute_solar_events",
    "equation_of_time_hours",
    "hour_angle_hours",
    "solar_declination_degrees",
]

SUNRISE_ZENITH_DEGREES = 90.833  # Geometric horizon plus refraction and solar radius.
_MICROSECONDS_PER_HOUR = 3_600_000_000.0


@dataclass(frozen=True)
class SolarEventSet:
    """Solar events for one UTC calendar date.

    ``sunrise`` and ``sunset`` are ``None`` when the sun does not cross the
    horizon that day (polar day or polar night), or when they fall outside the
    ``datetime`` range. ``transit`` is always set.
    """

    date: date
    transit: datetime
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None

    @property
    def has_horizon_crossing(self) -> bool:
        return self.sunrise is not None or self.sunset is not None

    def events(self) -> Iterator[Tuple[EventKind, datetime]]:
        """Yield the events that occur, in chronological order."""

        if self.sunrise is not None:
            yield EventKind.sunrise, self.sunrise
        yield EventKind.transit, self.transit
        if self.sunset is not None:
            yield EventKind.sunset, self.sunset


def solar_declination_degrees(day: float) -> float:
    """Solar declination for ordinal *day* of the year, as a Fourier series."""

    tt = 2.0 * math.pi * day / 366.0
    return (
        0.322003
        - 22.971 * math.cos(tt)
        - 0.357898 * math.cos(2.0 * tt)
        - 0.14398 * math.cos(3.0 * tt)
        + 3.94638 * math.sin(tt)
        + 0.019334 * math.sin(2.0 * tt)
        + 0.05928 * math.sin(3.0 * tt)
    )


def equation_of_time_hours(day: float) -> float:
    """Apparent minus mean solar time for ordinal *day*, in hours."""

    tt = math.radians(279.134 + 0.985647 * day)
    seconds = (
        5.0323
        - 100.976 * math.sin(tt)
        + 595.275 * math.sin(2.0 * tt)
        + 3.6858 * math.sin(3.0 * tt)
        - 12.47 * math.sin(4.0 * tt)
        - 430.847 * math.cos(tt)
        + 12.5024 * math.cos(2.0 * tt)
        + 18.25 * math.cos(3.0 * tt)
    )
    return seconds / 3600.0


def hour_angle_hours(day: float, latitude: float) -> Optional[float]:
    """Half day length in hours, or ``None`` when the sun never crosses the horizon."""

    lat_rad = math.radians(latitude)
    decl_rad = math.radians(solar_declination_degrees(day))
    zenith_rad = math.radians(SUNRISE_ZENITH_DEGREES)
    cos_ha = (
        math.cos(zenith_rad) / (math.cos(lat_rad) * math.cos(decl_rad))
        - math.tan(lat_rad) * math.tan(decl_rad)
    )
    # At the poles cos(lat) is ~6e-17, so the quotient is huge but finite.
    if not math.isfinite(cos_ha) or abs(cos_ha) > 1.0:
        return None
    return math.acos(cos_ha) * (12.0 / math.pi)


def _offset_from(midnight: datetime, hours: float) -> datetime:
    return midnight + timedelta(microseconds=int(hours * _MICROSECONDS_PER_HOUR))


def _representable_offset(midnight: datetime, hours: float) -> Optional[datetime]:
    try:
        return _offset_from(midnight, hours)
    except OverflowError:
        return None


def compute_solar_events(day: date, latitude: float, longitude: float) -> SolarEventSet:
    """Compute sunrise, transit and sunset for the UTC calendar date *day*.

    Parameters
    ----------
    day:
        Calendar date, interpreted in UTC.
    latitude, longitude:
        Geographic coordinates in degrees (east-positive longitude).

    Returns
    -------
    SolarEventSet
        Events as timezone-aware UTC datetimes with microsecond resolution.
        A sunrise or sunset beyond the ``datetime`` range is left out.

    Raises
    ------
    OverflowError
        If the transit itself falls outside the ``datetime`` range, which
        only happens on the first and last representable dates.
    """

    ordinal = float(day.timetuple().tm_yday)
    transit_hours = 12.0 - longitude / 15.0 - equation_of_time_hours(ordinal)

    midnight = datetime(day.year, day.month, day.day, tzinfo=UTC)
    transit = _offset_from(midnight, transit_hours)

    ha_hours = hour_angle_hours(ordinal, latitude)
    if ha_hours is None:
        return SolarEventSet(date=day, transit=transit)

    return SolarEventSet(
        date=day,
        transit=transit,
        sunrise=_representable_offset(midnight, transit_hours - ha_hours),
        sunset=_representable_offset(midnight, transit_hours + ha_hours),
    )
