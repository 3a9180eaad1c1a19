"""Configuration settings for the OpenWeatherMap forecast service."""

import os
from typing import Final
from dotenv import load_dotenv

load_dotenv()

# API Configuration
OWM_API_BASE_URL: Final[str] = "https://api.openweathermap.org/data/2.5/forecast"
OWM_ICON_URL: Final[str] = "https://openweathermap.org/img/w/{icon}.png"
OWM_API_KEY: str = os.getenv("OWM_API_KEY", "")
HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))

# Default location used until the user searches or shares their position
DEFAULT_CITY: str = os.getenv("DEFAULT_CITY", "Toronto")
# Empty means the host's local time zone
DEFAULT_TIMEZONE: str = os.getenv("DEFAULT_TIMEZONE", "")

# Fixture payload instead of live API calls
USE_MOCK_DATA: bool = os.getenv("USE_MOCK_DATA", "false").lower() == "true"
FIXTURE_PATH: str = os.getenv(
    "FIXTURE_PATH",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures", "five_days.json")
)

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

# Daily summary settings
MAX_FORECAST_DAYS: int = int(os.getenv("MAX_FORECAST_DAYS", "5"))
REPRESENTATIVE_HOUR_START: int = int(os.getenv("REPRESENTATIVE_HOUR_START", "12"))
REPRESENTATIVE_HOUR_END: int = int(os.getenv("REPRESENTATIVE_HOUR_END", "15"))  # inclusive

# Geolocation
GEOLOCATION_TIMEOUT_SECONDS: float = float(os.getenv("GEOLOCATION_TIMEOUT_SECONDS", "10"))
GEOLOCATION_MAX_AGE_SECONDS: float = float(os.getenv("GEOLOCATION_MAX_AGE_SECONDS", "600"))

# Redis cache configuration
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
CACHE_EXPIRE_SECONDS: int = int(os.getenv("CACHE_EXPIRE_SECONDS", "60"))
CACHE_PREFIX: str = os.getenv("CACHE_PREFIX", "owm-forecast")

# Rate limiting configuration (OpenWeatherMap free tier allows 60 calls/minute)
RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "60"))
RATE_LIMIT_WINDOW_SECONDS: float = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
RATE_LIMIT_REDIS_KEY_PREFIX: str = os.getenv("RATE_LIMIT_REDIS_KEY_PREFIX", "owm_rate_limit")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
