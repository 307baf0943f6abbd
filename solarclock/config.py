"""Configuration objects for the solar clock and their environment loader."""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass
from datetime import time, timedelta, timezone
from enum import Enum
from typing import Mapping, Optional

from .errors import ClockConfigurationError

__all__ = [
    "Coordinates",
    "EventKind",
    "SolarClockConfig",
    "SolarTargets",
    "TRANSIT_STRATEGIES",
    "fixed_offset",
    "parse_time_of_day",
    "resolve_clock_config",
]

LOGGER = logging.getLogger(__name__)

TRANSIT_STRATEGIES = ("hour_angle", "zenith_minimum")

DEFAULT_LATITUDE = 38.34599467937726
DEFAULT_LONGITUDE = -0.49068757240971655
DEFAULT_OFFSET_HOURS = 1.0
DEFAULT_SUNRISE = time(8, 0)
DEFAULT_TRANSIT = time(14, 0)
DEFAULT_SUNSET = time(20, 0)
DEFAULT_TRANSIT_STRATEGY = "hour_angle"


class EventKind(str, Enum):
    """Solar events that anchor the clock."""

    sunrise = "sunrise"
    transit = "transit"
    sunset = "sunset"


@dataclass(frozen=True)
class Coordinates:
    """Geographic position in degrees (east-positive longitude)."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.latitude) or not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude must be within [-90, 90]: {self.latitude}")
        if not math.isfinite(self.longitude) or not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude must be within [-180, 180]: {self.longitude}")


@dataclass(frozen=True)
class SolarTargets:
    """Wall-clock times, in the reference offset, assigned to each solar event."""

    sunrise: time
    transit: time
    sunset: time

    def __post_init__(self) -> None:
        for value in (self.sunrise, self.transit, self.sunset):
            if value.tzinfo is not None:
                raise ValueError("target times must be naive times of day")
        if not self.sunrise < self.transit < self.sunset:
            raise ValueError(
                "targets must satisfy sunrise < transit < sunset: "
                f"{self.sunrise}, {self.transit}, {self.sunset}"
            )

    def for_event(self, kind: EventKind) -> time:
        return getattr(self, EventKind(kind).value)


def fixed_offset(hours: float) -> timezone:
    """Return a DST-free :class:`~datetime.timezone` *hours* away from UTC."""

    if not math.isfinite(hours) or not -24.0 < hours < 24.0:
        raise ValueError(f"offset must be strictly within ±24 hours: {hours}")
    return timezone(timedelta(seconds=round(hours * 3600.0)))


@dataclass(frozen=True)
class SolarClockConfig:
    """Everything a single solar clock calculation needs besides the instant."""

    coordinates: Coordinates
    targets: SolarTargets
    reference_offset: timezone = timezone(timedelta(hours=DEFAULT_OFFSET_HOURS))
    transit_strategy: str = DEFAULT_TRANSIT_STRATEGY

    def __post_init__(self) -> None:
        if self.transit_strategy not in TRANSIT_STRATEGIES:
            raise ValueError(f"Unsupported transit strategy: {self.transit_strategy}")

    @property
    def reference_offset_hours(self) -> float:
        offset = self.reference_offset.utcoffset(None)
        return offset.total_seconds() / 3600.0


def parse_time_of_day(value: str) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into a naive :class:`~datetime.time`."""

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"time of day must be HH:MM or HH:MM:SS: {value!r}")
    try:
        numbers = [int(part) for part in parts]
    except ValueError as exc:
        raise ValueError(f"time of day must be numeric: {value!r}") from exc
    return time(*numbers)


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ClockConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _env_time(environ: Mapping[str, str], name: str, default: time) -> time:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parse_time_of_day(raw)
    except ValueError as exc:
        raise ClockConfigurationError(f"{name}: {exc}") from exc


def resolve_clock_config(environ: Optional[Mapping[str, str]] = None) -> SolarClockConfig:
    """Build a :class:`SolarClockConfig` from ``SOLAR_CLOCK_*`` variables.

    Parameters
    ----------
    environ:
        Mapping to read from; defaults to :data:`os.environ`.

    Raises
    ------
    ClockConfigurationError
        If a variable is present but malformed, or the values are inconsistent.
    """

    if environ is None:
        environ = os.environ

    latitude = _env_float(environ, "SOLAR_CLOCK_LAT", DEFAULT_LATITUDE)
    longitude = _env_float(environ, "SOLAR_CLOCK_LON", DEFAULT_LONGITUDE)
    offset_hours = _env_float(environ, "SOLAR_CLOCK_OFFSET_HOURS", DEFAULT_OFFSET_HOURS)
    strategy = environ.get("SOLAR_CLOCK_TRANSIT_STRATEGY") or DEFAULT_TRANSIT_STRATEGY

    try:
        config = SolarClockConfig(
            coordinates=Coordinates(latitude=latitude, longitude=longitude),
            targets=SolarTargets(
                sunrise=_env_time(environ, "SOLAR_CLOCK_SUNRISE", DEFAULT_SUNRISE),
                transit=_env_time(environ, "SOLAR_CLOCK_TRANSIT", DEFAULT_TRANSIT),
                sunset=_env_time(environ, "SOLAR_CLOCK_SUNSET", DEFAULT_SUNSET),
            ),
            reference_offset=fixed_offset(offset_hours),
            transit_strategy=strategy.strip(),
        )
    except ValueError as exc:
        raise ClockConfigurationError(f"Invalid solar clock configuration: {exc}") from exc

    LOGGER.info(
        json.dumps(
            {
                "event": "config_resolved",
                "latitude": latitude,
                "longitude": longitude,
                "offset_hours": config.reference_offset_hours,
                "targets": [
                    config.targets.sunrise.isoformat(),
                    config.targets.transit.isoformat(),
                    config.targets.sunset.isoformat(),
                ],
                "transit_strategy": config.transit_strategy,
            }
        )
    )
    return config
