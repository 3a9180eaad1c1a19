"""API endpoints for the forecast service."""

import logging
from typing import Optional, Tuple

from fastapi import APIRouter, HTTPException, Query
from fastapi_cache.decorator import cache

from owm_forecast.config import (
    DEFAULT_CITY, DEFAULT_TIMEZONE, CACHE_EXPIRE_SECONDS,
    MAX_FORECAST_DAYS, USE_MOCK_DATA
)
from owm_forecast.weather.location import (
    LocationResolver, UnsupportedLocationProvider
)
from owm_forecast.weather.models import Coordinates
from owm_forecast.weather.presentation import WeatherView, render
from owm_forecast.weather.service import WeatherService
from owm_forecast.weather.session import Failed, ViewMode, WeatherSession
from owm_forecast.weather.timezones import load_zone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/weather", tags=["weather"])


def get_weather_service() -> WeatherService:
    """Dependency to get weather service instance."""
    return WeatherService()


@router.get("/", response_model=WeatherView)
@cache(expire=CACHE_EXPIRE_SECONDS)
async def get_weather(
    lat: Optional[float] = Query(
        None,
        ge=-90,
        le=90,
        description="Device latitude in decimal degrees (use with lon)"
    ),
    lon: Optional[float] = Query(
        None,
        ge=-180,
        le=180,
        description="Device longitude in decimal degrees (use with lat)"
    ),
    city: Optional[str] = Query(
        None,
        description="City name (alternative to lat/lon, not both)"
    ),
    view: ViewMode = Query(
        ViewMode.CURRENT,
        description="'current' conditions or 5-day 'forecast'"
    ),
    timezone_option: str = Query(
        "local",
        pattern="^(local|location)$",
        description="Day boundaries in the viewer's zone ('local') or the city's zone ('location')"
    ),
    tz: Optional[str] = Query(
        None,
        description="Viewer's IANA time zone, e.g. 'America/Toronto'"
    ),
    precision: int = Query(
        1,
        ge=1,
        le=2,
        description="Decimal places for temperatures"
    )
) -> WeatherView:
    """Get current conditions or the 5-day forecast.

    Args:
        lat: Device latitude (must provide with lon)
        lon: Device longitude (must provide with lat)
        city: City name as alternative to lat/lon
        view: Which view to render
        timezone_option: Zone used for daily grouping
        tz: Viewer's time zone for 'local'
        precision: Temperature decimal places

    Returns:
        WeatherView ready for display

    Raises:
        HTTPException: If parameters are invalid or the forecast could not be loaded
    """
    coordinates, city = validate_weather_parameters(lat, lon, city)

    if tz:
        try:
            load_zone(tz)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    weather_service = get_weather_service()
    async with weather_service:
        session = WeatherSession(
            service=weather_service,
            resolver=LocationResolver(UnsupportedLocationProvider("No device location shared")),
            default_city=DEFAULT_CITY,
            timezone_option=timezone_option,
            tz_name=tz
        )
        session.set_view_mode(view)
        if coordinates is not None:
            state = await session.use_coordinates(coordinates)
        elif city is not None:
            state = await session.search(city)
        else:
            # Nothing shared by the page; fall back to the default city
            state = await session.start()

    if isinstance(state.load, Failed):
        status_code = 404 if state.load.status_code == 404 else 502
        raise HTTPException(status_code=status_code, detail=state.load.reason)

    result = render(state, precision)
    logger.info(f"Rendered {result.view_mode.value} view for {result.location}")
    return result


def validate_weather_parameters(
    lat: Optional[float],
    lon: Optional[float],
    city: Optional[str]
) -> Tuple[Optional[Coordinates], Optional[str]]:
    """
    Validate and normalize weather request parameters.

    Args:
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        city: City name

    Returns:
        Tuple of (coordinates or None, city or None)

    Raises:
        HTTPException: If validation fails
    """
    has_coordinates = lat is not None or lon is not None
    has_city = city is not None

    if has_coordinates and has_city:
        raise HTTPException(
            status_code=400,
            detail="Cannot provide both coordinates and city name. Use either lat/lon OR city."
        )

    if has_coordinates:
        if lat is None or lon is None:
            raise HTTPException(
                status_code=400,
                detail="Both latitude and longitude must be provided when using coordinates."
            )
        return Coordinates(lat=lat, lon=lon), None

    if has_city:
        if not city.strip():
            raise HTTPException(status_code=400, detail="City name must not be blank.")
        return None, city.strip()

    return None, None


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status response
    """
    return {"status": "healthy", "service": "owm-forecast"}


@router.get("/info")
async def get_service_info() -> dict:
    """Get service information.

    Returns:
        Service information including default location and features
    """
    return {
        "service": "OpenWeatherMap Forecast Service",
        "version": "0.1.0",
        "default_location": {
            "city": DEFAULT_CITY,
            "timezone": DEFAULT_TIMEZONE or "local"
        },
        "features": [
            "Current conditions",
            f"{MAX_FORECAST_DAYS}-day forecast with daily high and low",
            "City name or device location lookup",
            "Background theme from weather conditions"
        ],
        "data_source": "fixture" if USE_MOCK_DATA else "OpenWeatherMap API"
    }
