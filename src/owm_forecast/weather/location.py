"""Device location resolution with timeout and cached fixes."""

import asyncio
import logging
import time
from typing import Callable, Optional, Protocol

from owm_forecast.config import GEOLOCATION_TIMEOUT_SECONDS, GEOLOCATION_MAX_AGE_SECONDS
from owm_forecast.weather.models import Coordinates

logger = logging.getLogger(__name__)


class LocationUnavailableError(Exception):
    """Raised when no device position can be obtained."""
    pass


class LocationProvider(Protocol):
    async def locate(self) -> Coordinates:
        ...


class StaticLocationProvider:
    """Position already known, e.g. reported by the browser."""

    def __init__(self, coordinates: Coordinates):
        self.coordinates = coordinates

    async def locate(self) -> Coordinates:
        return self.coordinates


class UnsupportedLocationProvider:
    """No geolocation available for this session."""

    def __init__(self, message: str = "Geolocation is not supported"):
        self.message = message

    async def locate(self) -> Coordinates:
        raise LocationUnavailableError(self.message)


class LocationResolver:
    """Resolves the device position once per call, reusing recent fixes.

    A failed attempt is reported and never retried automatically.
    """

    def __init__(
        self,
        provider: LocationProvider,
        timeout: float = GEOLOCATION_TIMEOUT_SECONDS,
        max_age: float = GEOLOCATION_MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize the resolver.

        Args:
            provider: Source of device coordinates
            timeout: Seconds to wait for the provider
            max_age: Seconds a previous fix may be reused
            clock: Monotonic time source
        """
        self.provider = provider
        self.timeout = timeout
        self.max_age = max_age
        self.clock = clock
        self._last_fix: Optional[Coordinates] = None
        self._last_fix_at = 0.0

    async def resolve(self) -> Coordinates:
        """Get the device position.

        Raises:
            LocationUnavailableError: If the provider fails or times out
        """
        if self._last_fix is not None and self.clock() - self._last_fix_at <= self.max_age:
            logger.debug(f"Reusing cached location ({self._last_fix.lat}, {self._last_fix.lon})")
            return self._last_fix

        try:
            coordinates = await asyncio.wait_for(self.provider.locate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Location request timed out after {self.timeout}s")
            raise LocationUnavailableError("Location request timed out")
        except LocationUnavailableError as e:
            logger.warning(f"Location unavailable: {e}")
            raise

        self._last_fix = coordinates
        self._last_fix_at = self.clock()
        logger.info(f"Resolved location ({coordinates.lat}, {coordinates.lon})")
        return coordinates
