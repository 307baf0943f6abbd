"""Solar clock: real instants mapped onto a sunrise/noon/sunset anchored schedule."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone
from typing import Optional, Tuple

from .anchors import AnchorPoint, build_anchor_points
from .config import SolarClockConfig
from .errors import InsufficientDataError, InterpolationDomainError
from .interpolation import MonotoneClockInterpolant

__all__ = ["SolarClockReading", "calculate_solar_clock", "shift_by_seconds"]

LOGGER = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_OVERFLOW = "overflow"
STATUS_INSUFFICIENT_DATA = "insufficient_data"
STATUS_INTERPOLATION_DOMAIN = "interpolation_domain"


@dataclass(frozen=True)
class SolarClockReading:
    """Outcome of one solar clock calculation.

    ``solar_time`` and ``delta_seconds`` are ``None`` unless :attr:`ok`. With
    status ``overflow`` the solar time degrades to the input instant.
    """

    status: str
    input_utc: datetime
    delta_seconds: Optional[float] = None
    solar_time: Optional[datetime] = None
    anchors: Tuple[AnchorPoint, ...] = ()
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (STATUS_OK, STATUS_OVERFLOW)


def shift_by_seconds(instant: datetime, seconds: float) -> datetime:
    """Add *seconds* to *instant* as whole seconds plus a microsecond remainder."""

    whole = int(seconds)
    micros = round((seconds - whole) * 1_000_000)
    return instant + timedelta(seconds=whole) + timedelta(microseconds=micros)


def _in_offset(instant: datetime, offset: timezone) -> datetime:
    # The last UTC hours of 9999-12-31 have no representation east of UTC.
    try:
        return instant.astimezone(offset)
    except OverflowError:
        return instant


def calculate_solar_clock(instant: datetime, config: SolarClockConfig) -> SolarClockReading:
    """Compute the solar clock reading for *instant*.

    Parameters
    ----------
    instant:
        Any timezone-aware datetime; only the absolute instant it denotes
        matters, so differently-offset representations agree exactly.
    config:
        Location, targets, reference offset and transit strategy.

    Returns
    -------
    SolarClockReading
        ``ok`` with the solar time in ``config.reference_offset``, or a
        failure status when the anchors cannot support interpolation.
    """

    if instant.tzinfo is None:
        raise ValueError("instant must be timezone-aware")
    try:
        instant_utc = instant.astimezone(UTC)
    except OverflowError:
        detail = f"{instant.isoformat()} has no UTC representation"
        LOGGER.info(json.dumps({"event": STATUS_INSUFFICIENT_DATA, "detail": detail}))
        return SolarClockReading(
            status=STATUS_INSUFFICIENT_DATA, input_utc=instant, detail=detail
        )

    try:
        anchors = build_anchor_points(
            instant_utc,
            config.coordinates,
            config.targets,
            config.reference_offset,
            config.transit_strategy,
        )
    except InsufficientDataError as exc:
        LOGGER.info(json.dumps({"event": STATUS_INSUFFICIENT_DATA, "detail": str(exc)}))
        return SolarClockReading(
            status=STATUS_INSUFFICIENT_DATA, input_utc=instant_utc, detail=str(exc)
        )

    try:
        interpolant = MonotoneClockInterpolant(anchors)
        delta_seconds = interpolant.evaluate(instant_utc.timestamp())
    except InterpolationDomainError as exc:
        LOGGER.info(json.dumps({"event": STATUS_INTERPOLATION_DOMAIN, "detail": str(exc)}))
        return SolarClockReading(
            status=STATUS_INTERPOLATION_DOMAIN,
            input_utc=instant_utc,
            anchors=tuple(anchors),
            detail=str(exc),
        )

    status = STATUS_OK
    try:
        solar_time = shift_by_seconds(instant_utc, delta_seconds).astimezone(
            config.reference_offset
        )
    except OverflowError:
        LOGGER.warning(
            json.dumps(
                {
                    "event": "overflow_fallback",
                    "input": instant_utc.isoformat(),
                    "delta_s": delta_seconds,
                }
            )
        )
        status = STATUS_OVERFLOW
        solar_time = _in_offset(instant_utc, config.reference_offset)

    LOGGER.debug(
        json.dumps(
            {
                "event": "solar_clock",
                "input": instant_utc.isoformat(),
                "anchors": len(anchors),
                "delta_s": round(delta_seconds, 6),
                "solar_time": solar_time.isoformat(),
            }
        )
    )
    return SolarClockReading(
        status=status,
        input_utc=instant_utc,
        delta_seconds=delta_seconds,
        solar_time=solar_time,
        anchors=tuple(anchors),
    )
