"""Time zone resolution for day boundaries."""

import logging
import zoneinfo
from datetime import tzinfo
from functools import lru_cache
from typing import Optional, Tuple

from timezonefinder import TimezoneFinder

from owm_forecast.config import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)

HOST_LOCAL = "local"

# Shared by every resolver; the polygon data is loaded once per process
_finder: Optional[TimezoneFinder] = None


def get_finder() -> TimezoneFinder:
    global _finder
    if _finder is None:
        _finder = TimezoneFinder(in_memory=True)
        logger.info("TimezoneFinder initialized")
    return _finder


@lru_cache(maxsize=1000)
def lookup_timezone(lat: float, lon: float) -> str:
    """IANA zone name at the coordinates, "UTC" if not found."""
    try:
        logger.info(f"Finding timezone for coordinates: ({lat}, {lon})")
        timezone = get_finder().timezone_at(lng=lon, lat=lat)

        if timezone:
            logger.info(f"Found timezone '{timezone}' for ({lat}, {lon})")
            return timezone

        logger.warning(f"No timezone found for ({lat}, {lon}), defaulting to UTC")
        return "UTC"

    except ValueError as e:
        logger.error(f"Error getting timezone for ({lat}, {lon}): {e}")
        return "UTC"


class TimezoneResolver:
    """Resolves the zone used to split a forecast into calendar days."""

    def __init__(self, default_timezone: str = DEFAULT_TIMEZONE):
        """Initialize the resolver.

        Args:
            default_timezone: IANA name used when the consumer sends none;
                empty means the host's local zone
        """
        self.default_timezone = default_timezone

    def for_consumer(self, tz_name: Optional[str] = None) -> Tuple[Optional[tzinfo], str]:
        """Zone of the person looking at the forecast.

        Args:
            tz_name: IANA zone reported by the browser

        Returns:
            Tuple of (tzinfo or None for host local, zone label)

        Raises:
            ValueError: If the zone name is unknown
        """
        name = tz_name or self.default_timezone
        if not name:
            return None, HOST_LOCAL
        return load_zone(name), name

    def for_location(self, lat: float, lon: float) -> Tuple[Optional[tzinfo], str]:
        """Zone of the forecast location, UTC if it cannot be determined."""
        name = self.lookup(round(lat, 4), round(lon, 4))
        return load_zone(name), name

    def lookup(self, lat: float, lon: float) -> str:
        return lookup_timezone(lat, lon)


def load_zone(name: str) -> tzinfo:
    """Load an IANA zone, raising ValueError for unknown names."""
    try:
        return zoneinfo.ZoneInfo(name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown time zone: {name}") from e
