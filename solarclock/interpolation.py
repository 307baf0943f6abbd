"""Monotone piecewise-cubic interpolation of the solar clock."""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np
from scipy.interpolate import PchipInterpolator

from .anchors import AnchorPoint
from .errors import InterpolationDomainError

__all__ = ["MonotoneClockInterpolant"]


class MonotoneClockInterpolant:
    """PCHIP curve of solar instants through the anchors, refusing to extrapolate.

    The curve runs over ``x + y`` (the solar instant of each anchor) rather
    than over the delta, so the solar clock ``t + delta(t)`` is C1 and never
    decreases between anchors. Evaluation still returns the delta.
    """

    def __init__(self, points: Sequence[AnchorPoint]):
        if len(points) < 2:
            raise InterpolationDomainError(
                f"at least two anchors are required, got {len(points)}"
            )
        xs = np.array([point.x for point in points], dtype=float)
        ys = np.array([point.y for point in points], dtype=float)
        if not (np.all(np.isfinite(xs)) and np.all(np.isfinite(ys))):
            raise InterpolationDomainError("anchor coordinates must be finite")
        if np.any(np.diff(xs) <= 0):
            raise InterpolationDomainError("anchor x values must be strictly increasing")
        # Relative to the first node, POSIX seconds keep sub-microsecond precision.
        origin = xs[0]
        offsets = xs - origin
        solar = offsets + ys
        if np.any(np.diff(solar) <= 0):
            raise InterpolationDomainError("anchor solar instants must be strictly increasing")
        try:
            self._curve = PchipInterpolator(offsets, solar, extrapolate=False)
        except ValueError as exc:
            raise InterpolationDomainError(f"cannot build interpolant: {exc}") from exc
        self._origin = float(origin)
        self._xs = xs
        self._ys = ys

    @property
    def domain(self) -> Tuple[float, float]:
        return float(self._xs[0]), float(self._xs[-1])

    def __call__(self, x: float) -> float:
        return self.evaluate(x)

    def evaluate(self, x: float) -> float:
        """Interpolated delta at POSIX seconds *x*.

        Raises
        ------
        InterpolationDomainError
            If *x* lies outside the anchor range.
        """

        low, high = self.domain
        if not math.isfinite(x) or x < low or x > high:
            raise InterpolationDomainError(
                f"{x!r} is outside the interpolation domain [{low}, {high}]"
            )
        index = int(np.searchsorted(self._xs, x))
        if index < len(self._xs) and self._xs[index] == x:
            return float(self._ys[index])
        offset = x - self._origin
        value = float(self._curve(offset)) - offset
        if not math.isfinite(value):
            raise InterpolationDomainError(f"interpolant is undefined at {x!r}")
        return value
