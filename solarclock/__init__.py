"""Solar clock computations: solar events, anchors and monotone interpolation."""

from .clock import SolarClockReading, calculate_solar_clock
from .config import Coordinates, SolarClockConfig, SolarTargets, resolve_clock_config
from .errors import InsufficientDataError, InterpolationDomainError, SolarClockError
from .solar import SolarEventSet, compute_solar_events

__all__ = [
    "Coordinates",
    "InsufficientDataError",
    "InterpolationDomainError",
    "SolarClockConfig",
    "SolarClockError",
    "SolarClockReading",
    "SolarEventSet",
    "SolarTargets",
    "calculate_solar_clock",
    "compute_solar_events",
    "resolve_clock_config",
]
