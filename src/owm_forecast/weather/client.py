"""Weather data sources: the OpenWeatherMap HTTP API and a fixture payload."""

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from owm_forecast.config import (
    OWM_API_BASE_URL, OWM_API_KEY, HTTP_TIMEOUT_SECONDS,
    USE_MOCK_DATA, FIXTURE_PATH
)
from owm_forecast.weather.models import Query

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when the data source is missing required settings."""
    pass


class WeatherSource(Protocol):
    """Anything that can produce a raw forecast payload for a query."""

    async def get_forecast(self, query: Query) -> Dict[str, Any]:
        ...

    async def aclose(self) -> None:
        ...


class OpenWeatherMapClient:
    """Async client for the OpenWeatherMap 5 day / 3 hour forecast API."""

    def __init__(
        self,
        api_key: str = OWM_API_KEY,
        base_url: str = OWM_API_BASE_URL,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the weather client.

        Args:
            api_key: OpenWeatherMap API key sent as the appid parameter
            base_url: Forecast endpoint URL
            http_client: Preconfigured httpx client (creates default if None)
        """
        self.api_key = api_key
        self.base_url = base_url
        self.client = http_client or httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS)

    async def get_forecast(self, query: Query) -> Dict[str, Any]:
        """Fetch the forecast for a city name or coordinates.

        Args:
            query: Location to fetch

        Returns:
            Raw forecast payload as returned by the API

        Raises:
            ConfigurationError: If no API key is configured
            httpx.HTTPError: If the API request fails
        """
        if not self.api_key:
            raise ConfigurationError("OpenWeatherMap API key is not configured (set OWM_API_KEY)")

        params = {**query.params(), "appid": self.api_key}

        logger.info(f"Fetching forecast for {query.describe()}")

        try:
            response = await self.client.get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()

            logger.info(f"Successfully fetched forecast with {len(data.get('list') or [])} entries")
            return data

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error from OpenWeatherMap API: {e.response.status_code} - {e.response.text}")
            raise
        except httpx.RequestError as e:
            logger.error(f"Request error to OpenWeatherMap API: {e}")
            raise

    async def aclose(self) -> None:
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


class FixtureWeatherSource:
    """Serves a forecast payload stored on disk, whatever the query."""

    def __init__(self, path: str = FIXTURE_PATH):
        self.path = path

    async def get_forecast(self, query: Query) -> Dict[str, Any]:
        logger.info(f"Serving fixture forecast from {self.path} for {query.describe()}")
        return await asyncio.to_thread(_read_payload, self.path)

    async def aclose(self) -> None:
        pass


def _read_payload(path: str) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def create_weather_source() -> WeatherSource:
    """Pick the fixture or the live API according to configuration."""
    if USE_MOCK_DATA:
        return FixtureWeatherSource()
    return OpenWeatherMapClient()
