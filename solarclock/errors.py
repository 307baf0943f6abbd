"""Exceptions raised by the solar clock computations."""

from __future__ import annotations


class SolarClockError(RuntimeError):
    """Base class for recoverable solar clock failures."""


class InsufficientDataError(SolarClockError):
    """Raised when the event window cannot anchor an interpolant."""


class InterpolationDomainError(SolarClockError):
    """Raised when an interpolant is degenerate or queried outside its anchors."""


class ClockConfigurationError(RuntimeError):
    """Raised when the clock configuration cannot be resolved."""
