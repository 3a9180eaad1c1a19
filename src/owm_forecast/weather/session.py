"""Session controller tying location, fetching and view state together."""

import logging
from enum import Enum
from typing import Literal, Optional, Tuple, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from owm_forecast.config import DEFAULT_CITY
from owm_forecast.weather.client import ConfigurationError
from owm_forecast.weather.location import LocationResolver, LocationUnavailableError
from owm_forecast.weather.models import Coordinates, ForecastData, Query
from owm_forecast.weather.service import IncompletePayloadError, WeatherService

logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    CURRENT = "current"
    FORECAST = "forecast"


class Idle(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["idle"] = "idle"


class Loading(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["loading"] = "loading"


class Ready(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["ready"] = "ready"
    data: ForecastData


class Failed(BaseModel):
    """Failed load; keeps the last successful result for display."""
    model_config = ConfigDict(frozen=True)
    kind: Literal["failed"] = "failed"
    reason: str
    status_code: Optional[int] = None
    previous: Optional[Ready] = None


LoadState = Union[Idle, Loading, Ready, Failed]


class SessionState(BaseModel):
    """Everything one user session displays."""
    model_config = ConfigDict(frozen=True)

    query: Optional[Query] = Field(None, description="Active query, city or coordinates")
    last_location: str = Field(DEFAULT_CITY, description="Last manually submitted city")
    view_mode: ViewMode = ViewMode.CURRENT
    load: LoadState = Field(default_factory=Idle)
    diagnostics: Tuple[str, ...] = ()


class WeatherSession:
    """Drives one user's lookups.

    Location resolution always finishes before the first fetch. When several
    fetches overlap, only the most recently issued one updates the state.
    """

    def __init__(
        self,
        service: WeatherService,
        resolver: LocationResolver,
        default_city: str = DEFAULT_CITY,
        timezone_option: str = "local",
        tz_name: Optional[str] = None
    ):
        self.service = service
        self.resolver = resolver
        self.timezone_option = timezone_option
        self.tz_name = tz_name
        self.state = SessionState(last_location=default_city)
        self._generation = 0
        self._last_ready: Optional[Ready] = None

    async def start(self) -> SessionState:
        """Resolve the device location, then load the forecast.

        Falls back to the last manual location when no position is available.
        """
        try:
            coordinates = await self.resolver.resolve()
        except LocationUnavailableError as e:
            self._add_diagnostic(str(e))
            logger.info(f"Falling back to {self.state.last_location}")
            query = Query.for_city(self.state.last_location)
        else:
            query = Query.for_coordinates(coordinates)

        return await self.refresh(query)

    async def search(self, city: str) -> SessionState:
        """Manual search; replaces any coordinate query.

        Raises:
            ValidationError: If the city name is blank
        """
        query = Query.for_city(city)
        self._update(last_location=query.city)
        return await self.refresh(query)

    async def use_coordinates(self, coordinates: Coordinates) -> SessionState:
        return await self.refresh(Query.for_coordinates(coordinates))

    def set_view_mode(self, mode: Union[ViewMode, str]) -> SessionState:
        self._update(view_mode=ViewMode(mode))
        return self.state

    async def refresh(self, query: Query) -> SessionState:
        """Load the forecast for a query.

        Failures end up in the state as Failed instead of being raised.
        """
        self._generation += 1
        generation = self._generation
        self._update(query=query, load=Loading())

        try:
            data = await self.service.get_forecast(query, self.timezone_option, self.tz_name)
            load: LoadState = Ready(data=data)
        except httpx.HTTPStatusError as e:
            load = self._failed(_describe_status(e.response.status_code, query), e.response.status_code)
        except httpx.RequestError as e:
            load = self._failed(f"Weather service unreachable: {e}")
        except ConfigurationError as e:
            load = self._failed(f"Weather service is not configured: {e}")
        except IncompletePayloadError as e:
            load = self._failed(str(e))
        except (ValidationError, ValueError) as e:
            load = self._failed(f"Invalid forecast data: {e}")

        if generation != self._generation:
            logger.info(f"Discarding stale response for {query.describe()}")
            return self.state

        if isinstance(load, Ready):
            self._last_ready = load
            logger.info(f"Loaded {len(load.data.daily)} daily summaries for {load.data.city.label()}")
        self._update(load=load)
        return self.state

    def _failed(self, reason: str, status_code: Optional[int] = None) -> Failed:
        logger.error(f"Forecast load failed: {reason}")
        return Failed(reason=reason, status_code=status_code, previous=self._last_ready)

    def _add_diagnostic(self, message: str) -> None:
        self._update(diagnostics=(*self.state.diagnostics, message))

    def _update(self, **changes) -> None:
        self.state = self.state.model_copy(update=changes)


def _describe_status(status_code: int, query: Query) -> str:
    if status_code == 404:
        return f"Location not found: {query.describe()}"
    if status_code == 401:
        return "Weather service rejected the API key"
    return f"Weather service returned HTTP {status_code}"
