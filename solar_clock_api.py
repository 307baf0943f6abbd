"""FastAPI application exposing the solar clock."""

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import UTC, datetime
from datetime import time as time_of_day
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from models import (
    ClockQueryParams,
    ClockResponse,
    ErrorResponse,
    EventsQueryParams,
    EventsResponse,
    HealthResponse,
    TransitStrategy,
)
from solarclock.clock import calculate_solar_clock
from solarclock.config import (
    Coordinates,
    SolarClockConfig,
    SolarTargets,
    fixed_offset,
    resolve_clock_config,
)
from solarclock.errors import ClockConfigurationError
from solarclock.solar import compute_solar_events
from solarclock.transit import apply_transit_strategy

logging.basicConfig(level=logging.INFO, format="%(message)s")
LOGGER = logging.getLogger("solar-clock-api")

APP_DESCRIPTION = (
    "Solar clock: civil time warped so that sunrise, solar noon and sunset "
    "fall on fixed clock times"
)

CLOCK_CONFIG: Optional[SolarClockConfig] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global CLOCK_CONFIG
    try:
        CLOCK_CONFIG = resolve_clock_config()
    except ClockConfigurationError as exc:
        LOGGER.error(json.dumps({"event": "config_failed", "error": str(exc)}))
        raise
    LOGGER.info(
        json.dumps({"event": "startup", "transit_strategy": CLOCK_CONFIG.transit_strategy})
    )
    yield


app = FastAPI(
    title="Solar Clock API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)


def _active_config() -> SolarClockConfig:
    global CLOCK_CONFIG
    if CLOCK_CONFIG is None:
        CLOCK_CONFIG = resolve_clock_config()
    return CLOCK_CONFIG


def _override_config(
    base: SolarClockConfig,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    offset_hours: Optional[float] = None,
    transit_strategy: Optional[TransitStrategy] = None,
    sunrise: Optional[time_of_day] = None,
    transit: Optional[time_of_day] = None,
    sunset: Optional[time_of_day] = None,
) -> SolarClockConfig:
    try:
        coordinates = base.coordinates
        if lat is not None or lon is not None:
            coordinates = Coordinates(
                latitude=coordinates.latitude if lat is None else lat,
                longitude=coordinates.longitude if lon is None else lon,
            )
        targets = base.targets
        if sunrise is not None or transit is not None or sunset is not None:
            targets = SolarTargets(
                sunrise=targets.sunrise if sunrise is None else sunrise,
                transit=targets.transit if transit is None else transit,
                sunset=targets.sunset if sunset is None else sunset,
            )
        return replace(
            base,
            coordinates=coordinates,
            targets=targets,
            reference_offset=(
                base.reference_offset if offset_hours is None else fixed_offset(offset_hours)
            ),
            transit_strategy=(
                base.transit_strategy if transit_strategy is None else transit_strategy.value
            ),
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _format_utc(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _format_local(dt: Optional[datetime], config: SolarClockConfig) -> Optional[str]:
    if dt is None:
        return None
    return dt.astimezone(config.reference_offset).isoformat()


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(ValidationError)
async def model_validation_exception_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        code = detail.get("code") or f"http_{exc.status_code}"
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        code = f"http_{exc.status_code}"
        message = ", ".join(str(item) for item in detail)
    else:
        code = f"http_{exc.status_code}"
        message = str(detail)
    return _error_response(exc.status_code, code, message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    config = _active_config()
    return HealthResponse(
        ok=True,
        latitude=config.coordinates.latitude,
        longitude=config.coordinates.longitude,
        reference_offset_hours=config.reference_offset_hours,
        transit_strategy=TransitStrategy(config.transit_strategy),
    )


@app.get(
    "/clock",
    response_model=ClockResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def clock_endpoint(params: ClockQueryParams = Depends()) -> ClockResponse:
    start_time = time.perf_counter()
    config = _override_config(
        _active_config(),
        lat=params.lat,
        lon=params.lon,
        offset_hours=params.offset_hours,
        transit_strategy=params.transit_strategy,
        sunrise=params.sunrise,
        transit=params.transit,
        sunset=params.sunset,
    )
    instant = params.at if params.at is not None else datetime.now(UTC)
    if instant.tzinfo is None:
        raise HTTPException(status_code=400, detail="at must include a UTC offset")

    reading = calculate_solar_clock(instant, config)
    if not reading.ok:
        raise HTTPException(
            status_code=422,
            detail={"code": reading.status, "error": reading.detail or reading.status},
        )

    duration_ms = (time.perf_counter() - start_time) * 1000.0
    response = ClockResponse(
        status=reading.status,
        input_utc=_format_utc(reading.input_utc),
        solar_time=reading.solar_time.isoformat(),
        delta_seconds=reading.delta_seconds,
        anchors=len(reading.anchors),
        latitude=config.coordinates.latitude,
        longitude=config.coordinates.longitude,
        reference_offset_hours=config.reference_offset_hours,
        transit_strategy=TransitStrategy(config.transit_strategy),
    )

    LOGGER.info(
        json.dumps(
            {
                "event": "clock",
                "lat": config.coordinates.latitude,
                "lon": config.coordinates.longitude,
                "input": response.input_utc,
                "status": response.status,
                "delta_s": round(response.delta_seconds, 3),
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response


@app.get(
    "/events",
    response_model=EventsResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def events_endpoint(params: EventsQueryParams = Depends()) -> EventsResponse:
    start_time = time.perf_counter()
    config = _override_config(
        _active_config(),
        lat=params.lat,
        lon=params.lon,
        offset_hours=params.offset_hours,
        transit_strategy=params.transit_strategy,
    )
    coordinates = config.coordinates
    try:
        events = compute_solar_events(
            params.date_utc, coordinates.latitude, coordinates.longitude
        )
        events = apply_transit_strategy(events, coordinates, config.transit_strategy)
        local_times = [
            _format_local(event, config)
            for event in (events.sunrise, events.transit, events.sunset)
        ]
    except OverflowError:
        raise HTTPException(
            status_code=422,
            detail={
                "code": "out_of_range",
                "error": f"solar events on {params.date_utc.isoformat()} fall outside "
                "the supported datetime range",
            },
        )
    sunrise_local, transit_local, sunset_local = local_times

    duration_ms = (time.perf_counter() - start_time) * 1000.0
    response = EventsResponse(
        status="ok" if events.has_horizon_crossing else "no_horizon_crossing",
        date_utc=params.date_utc,
        latitude=coordinates.latitude,
        longitude=coordinates.longitude,
        reference_offset_hours=config.reference_offset_hours,
        transit_strategy=TransitStrategy(config.transit_strategy),
        sunrise_utc=_format_utc(events.sunrise),
        transit_utc=_format_utc(events.transit),
        sunset_utc=_format_utc(events.sunset),
        sunrise_local=sunrise_local,
        transit_local=transit_local,
        sunset_local=sunset_local,
    )

    LOGGER.info(
        json.dumps(
            {
                "event": "events",
                "lat": coordinates.latitude,
                "lon": coordinates.longitude,
                "date": params.date_utc.isoformat(),
                "status": response.status,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response
