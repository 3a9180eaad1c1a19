"""Weather service turning raw forecast payloads into daily summaries."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from owm_forecast.weather.aggregator import summarize_daily
from owm_forecast.weather.client import WeatherSource, create_weather_source
from owm_forecast.weather.models import (
    ForecastData, ForecastSample, OwmCity, OwmForecastEntry,
    OwmForecastResponse, Query
)
from owm_forecast.weather.timezones import TimezoneResolver

logger = logging.getLogger(__name__)

TIMEZONE_OPTIONS = ("local", "location")


class IncompletePayloadError(Exception):
    """Raised when a forecast payload lacks its list or city block."""
    pass


class WeatherService:
    """Service for fetching and summarizing forecast data."""

    def __init__(
        self,
        source: Optional[WeatherSource] = None,
        timezone_resolver: Optional[TimezoneResolver] = None
    ):
        """Initialize the weather service.

        Args:
            source: Weather data source (picked from config if None)
            timezone_resolver: Time zone resolver (creates default if None)
        """
        self.source = source or create_weather_source()
        self.timezone_resolver = timezone_resolver or TimezoneResolver()

    async def get_forecast(
        self,
        query: Query,
        timezone_option: str = "local",
        tz_name: Optional[str] = None
    ) -> ForecastData:
        """Fetch a forecast and group it into daily summaries.

        Args:
            query: City name or coordinates
            timezone_option: 'local' for the consumer's zone, 'location' for the city's zone
            tz_name: Consumer's IANA zone, used with 'local'

        Returns:
            ForecastData with all samples and up to five daily summaries

        Raises:
            ValueError: If the time zone option or name is invalid
            IncompletePayloadError: If the payload lacks list or city
            httpx.HTTPError: If the API request fails
            ValidationError: If the payload has the wrong shape
        """
        if timezone_option not in TIMEZONE_OPTIONS:
            raise ValueError(f"Invalid timezone option: {timezone_option}")

        raw_data = await self.source.get_forecast(query)
        city, samples = self._parse_payload(raw_data)

        if timezone_option == "location" and city.coord is not None:
            tz, tz_label = self.timezone_resolver.for_location(city.coord.lat, city.coord.lon)
        else:
            tz, tz_label = self.timezone_resolver.for_consumer(tz_name)

        logger.info(f"Summarizing {len(samples)} samples for {city.label()} in timezone {tz_label}")

        return ForecastData(
            city=city,
            samples=samples,
            daily=summarize_daily(samples, tz),
            timezone=tz_label
        )

    def _parse_payload(self, raw_data: Dict[str, Any]) -> Tuple[OwmCity, List[ForecastSample]]:
        """Validate the payload and flatten its entries.

        Returns:
            Tuple of (city, samples)
        """
        response = OwmForecastResponse.model_validate(raw_data)

        missing = [name for name, value in (("list", response.entries), ("city", response.city)) if value is None]
        if missing:
            raise IncompletePayloadError(f"Forecast payload is missing: {', '.join(missing)}")

        return response.city, self._to_samples(response.entries)

    def _to_samples(self, entries: List[Dict[str, Any]]) -> List[ForecastSample]:
        samples = []
        for entry in entries:
            try:
                samples.append(OwmForecastEntry.model_validate(entry).to_sample())
            except ValidationError as e:
                logger.warning(f"Skipping invalid forecast entry: {e}")
                continue
        return samples

    async def aclose(self):
        """Close the weather source."""
        try:
            await self.source.aclose()
        except Exception as e:
            logger.error(f"Error closing weather source: {e}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
