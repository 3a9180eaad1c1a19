"""Data models for the forecast service."""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ForecastSample(BaseModel):
    """One 3-hour forecast observation, flattened from the OpenWeatherMap entry."""
    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(..., description="Seconds since epoch (UTC)")
    temperature: float = Field(..., description="Temperature in Kelvin")
    feels_like: float = Field(..., description="Feels-like temperature in Kelvin")
    humidity: float = Field(..., description="Relative humidity in %")
    pressure: float = Field(..., description="Pressure in hPa")
    wind_speed: float = Field(0.0, description="Wind speed in m/s")
    clouds: float = Field(0.0, description="Cloud coverage in %")
    visibility: Optional[float] = Field(None, description="Visibility in meters")
    category: Optional[str] = Field(None, description="Primary weather category, e.g. 'Rain'")
    description: str = Field("", description="Human readable condition")
    icon: str = Field("", description="OpenWeatherMap icon code")


class DailySummary(BaseModel):
    """Representative sample and temperature range for one local calendar day."""
    model_config = ConfigDict(frozen=True)

    day: date = Field(..., description="Local calendar day")
    representative: ForecastSample = Field(..., description="Sample shown for the day")
    daily_min: float = Field(..., description="Lowest temperature of the day in Kelvin")
    daily_max: float = Field(..., description="Highest temperature of the day in Kelvin")


class Coordinates(BaseModel):
    """Latitude/longitude pair."""
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")


class Query(BaseModel):
    """Forecast lookup key: a city name or coordinates, never both."""
    model_config = ConfigDict(frozen=True)

    city: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    @field_validator("city", mode="before")
    @classmethod
    def _strip_city(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("City name must not be blank")
        return value

    @model_validator(mode="after")
    def _exactly_one(self) -> "Query":
        if (self.city is None) == (self.coordinates is None):
            raise ValueError("Provide either a city name or coordinates, not both")
        return self

    @classmethod
    def for_city(cls, city: str) -> "Query":
        return cls(city=city)

    @classmethod
    def for_coordinates(cls, coordinates: Coordinates) -> "Query":
        return cls(coordinates=coordinates)

    def params(self) -> dict:
        """Request parameters identifying the location."""
        if self.coordinates is not None:
            return {"lat": round(self.coordinates.lat, 4), "lon": round(self.coordinates.lon, 4)}
        return {"q": self.city}

    def describe(self) -> str:
        if self.coordinates is not None:
            return f"({self.coordinates.lat}, {self.coordinates.lon})"
        return self.city


class OwmMain(BaseModel):
    temp: float
    feels_like: float
    humidity: float
    pressure: float


class OwmCondition(BaseModel):
    main: Optional[str] = None
    description: str = ""
    icon: str = ""


class OwmWind(BaseModel):
    speed: float = 0.0


class OwmClouds(BaseModel):
    all: float = 0.0


class OwmForecastEntry(BaseModel):
    """Raw forecast entry from the OpenWeatherMap 5 day / 3 hour API."""
    dt: int = Field(..., description="Forecast time, seconds since epoch")
    main: OwmMain
    weather: List[OwmCondition] = Field(default_factory=list)
    wind: OwmWind = Field(default_factory=OwmWind)
    clouds: OwmClouds = Field(default_factory=OwmClouds)
    visibility: Optional[float] = None

    def to_sample(self) -> ForecastSample:
        condition = self.weather[0] if self.weather else OwmCondition()
        return ForecastSample(
            timestamp=self.dt,
            temperature=self.main.temp,
            feels_like=self.main.feels_like,
            humidity=self.main.humidity,
            pressure=self.main.pressure,
            wind_speed=self.wind.speed,
            clouds=self.clouds.all,
            visibility=self.visibility,
            category=condition.main,
            description=condition.description,
            icon=condition.icon,
        )


class OwmCoord(BaseModel):
    lat: float
    lon: float


class OwmCity(BaseModel):
    """City block of the forecast response."""
    name: str = Field(..., description="City name")
    country: Optional[str] = Field(None, description="ISO 3166 country code")
    coord: Optional[OwmCoord] = Field(None, description="City coordinates")
    timezone: Optional[int] = Field(None, description="UTC offset in seconds")

    def label(self) -> str:
        return f"{self.name}, {self.country}" if self.country else self.name


class OwmForecastResponse(BaseModel):
    """Raw response from the OpenWeatherMap forecast API.

    Both fields are optional here so that an incomplete payload can be
    reported as such instead of as a validation failure.
    """
    entries: Optional[List[dict]] = Field(None, alias="list", description="Forecast entries")
    city: Optional[OwmCity] = Field(None, description="Forecast location")


class ForecastData(BaseModel):
    """Parsed forecast ready for presentation."""
    city: OwmCity
    samples: List[ForecastSample] = Field(..., description="All samples in input order")
    daily: List[DailySummary] = Field(..., description="Daily summaries, at most five")
    timezone: str = Field(..., description="Time zone used for day boundaries")

    @property
    def current(self) -> Optional[ForecastSample]:
        return self.samples[0] if self.samples else None
