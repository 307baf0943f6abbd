"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TransitStrategy(str, Enum):
    """Precision tiers for the solar transit instant."""

    hour_angle = "hour_angle"
    zenith_minimum = "zenith_minimum"


def _check_offset_hours(value: Optional[float]) -> Optional[float]:
    if value is None:
        return value
    if not -24.0 < value < 24.0:
        raise ValueError("offset_hours must be strictly within ±24 hours")
    return value


class ClockQueryParams(BaseModel):
    """Validated query parameters for the ``/clock`` endpoint.

    Every location or schedule field left unset falls back to the server
    configuration.
    """

    at: Optional[datetime] = Field(
        None, description="Instant to convert (ISO-8601 with offset); defaults to now"
    )
    lat: Optional[float] = Field(None, ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: Optional[float] = Field(
        None, ge=-180.0, le=180.0, description="Longitude in degrees"
    )
    offset_hours: Optional[float] = Field(
        None, description="Fixed reference offset of the solar clock, in hours"
    )
    sunrise: Optional[time] = Field(None, description="Target clock time of sunrise")
    transit: Optional[time] = Field(None, description="Target clock time of solar noon")
    sunset: Optional[time] = Field(None, description="Target clock time of sunset")
    transit_strategy: Optional[TransitStrategy] = Field(
        None, description="How the transit instant is computed"
    )

    @field_validator("offset_hours")
    def validate_offset_hours(cls, value: Optional[float]) -> Optional[float]:
        return _check_offset_hours(value)


class EventsQueryParams(BaseModel):
    """Validated query parameters for the ``/events`` endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    date_utc: date = Field(..., alias="date", description="UTC calendar date (YYYY-MM-DD)")
    lat: Optional[float] = Field(None, ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: Optional[float] = Field(
        None, ge=-180.0, le=180.0, description="Longitude in degrees"
    )
    offset_hours: Optional[float] = Field(
        None, description="Fixed reference offset used for the local times, in hours"
    )
    transit_strategy: Optional[TransitStrategy] = Field(
        None, description="How the transit instant is computed"
    )

    @field_validator("offset_hours")
    def validate_offset_hours(cls, value: Optional[float]) -> Optional[float]:
        return _check_offset_hours(value)


class ClockResponse(BaseModel):
    """Successful solar clock payload."""

    ok: bool = True
    status: str = Field(..., description="Computation status (ok or overflow)")
    input_utc: str = Field(..., description="Input instant in UTC (ISO-8601)")
    solar_time: str = Field(
        ..., description="Solar clock time in the reference offset (ISO-8601)"
    )
    delta_seconds: float = Field(..., description="Solar clock minus real time, in seconds")
    anchors: int = Field(..., description="Number of anchor events used")
    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees")
    reference_offset_hours: float = Field(..., description="Reference offset in hours")
    transit_strategy: TransitStrategy = Field(..., description="Applied transit strategy")


class EventsResponse(BaseModel):
    """Solar events for one UTC date."""

    ok: bool = True
    status: str = Field(..., description="ok or no_horizon_crossing")
    date_utc: date = Field(..., description="Requested UTC date")
    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees")
    reference_offset_hours: float = Field(..., description="Offset of the local times")
    transit_strategy: TransitStrategy = Field(..., description="Applied transit strategy")
    sunrise_utc: Optional[str] = Field(None, description="Sunrise in UTC (ISO-8601)")
    transit_utc: str = Field(..., description="Solar transit in UTC (ISO-8601)")
    sunset_utc: Optional[str] = Field(None, description="Sunset in UTC (ISO-8601)")
    sunrise_local: Optional[str] = Field(None, description="Sunrise in the reference offset")
    transit_local: str = Field(..., description="Solar transit in the reference offset")
    sunset_local: Optional[str] = Field(None, description="Sunset in the reference offset")


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    latitude: float
    longitude: float
    reference_offset_hours: float
    transit_strategy: TransitStrategy


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
