"""Display models built from the session state."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from owm_forecast.config import OWM_ICON_URL
from owm_forecast.weather.models import DailySummary, ForecastData, ForecastSample
from owm_forecast.weather.session import Failed, Ready, SessionState, ViewMode
from owm_forecast.weather.themes import Theme, theme_for_category
from owm_forecast.weather.units import format_celsius, format_visibility_km


class CurrentConditions(BaseModel):
    """Current conditions card."""
    temperature: str = Field(..., description="Temperature in °C")
    feels_like: str = Field(..., description="Feels-like temperature in °C")
    humidity: float = Field(..., description="Humidity in %")
    wind_speed: float = Field(..., description="Wind speed in m/s")
    pressure: float = Field(..., description="Pressure in hPa")
    visibility_km: str = Field(..., description="Visibility in km")
    clouds: float = Field(..., description="Cloud coverage in %")
    description: str
    icon_url: Optional[str] = None


class DayCard(BaseModel):
    """One day of the 5-day forecast."""
    date: str = Field(..., description="Day in YYYY-MM-DD format")
    label: str = Field(..., description="Short day label, e.g. 'Mon, Mar 4'")
    temperature: str = Field(..., description="Representative temperature in °C")
    high: str = Field(..., description="Daily maximum in °C")
    low: str = Field(..., description="Daily minimum in °C")
    description: str
    humidity: float
    wind_speed: float
    icon_url: Optional[str] = None


class WeatherView(BaseModel):
    """What the page displays for one session state."""
    status: Literal["loading", "ready", "stale", "error"]
    view_mode: ViewMode
    theme: Theme = Theme.DEFAULT
    theme_class: str = Theme.DEFAULT.css_class
    location: Optional[str] = Field(None, description="'City, CC' label")
    timezone: Optional[str] = None
    current: Optional[CurrentConditions] = None
    forecast: List[DayCard] = Field(default_factory=list)
    error: Optional[str] = None
    diagnostics: List[str] = Field(default_factory=list)


def icon_url(icon: str) -> Optional[str]:
    return OWM_ICON_URL.format(icon=icon) if icon else None


def render(state: SessionState, precision: int = 1) -> WeatherView:
    """Build the view for the session's current load state and view mode.

    Args:
        state: Session state to display
        precision: Decimal places for temperatures (1 or 2)

    Returns:
        WeatherView; loading until data is available, stale when showing a
        previous result after a failed reload
    """
    diagnostics = list(state.diagnostics)
    load = state.load

    if isinstance(load, Failed):
        if load.previous is None:
            return WeatherView(
                status="error",
                view_mode=state.view_mode,
                error=load.reason,
                diagnostics=diagnostics
            )
        return _render_data(load.previous.data, state.view_mode, precision, "stale",
                            diagnostics + [load.reason], error=load.reason)

    if isinstance(load, Ready):
        return _render_data(load.data, state.view_mode, precision, "ready", diagnostics)

    return WeatherView(status="loading", view_mode=state.view_mode, diagnostics=diagnostics)


def _render_data(
    data: ForecastData,
    view_mode: ViewMode,
    precision: int,
    status: str,
    diagnostics: List[str],
    error: Optional[str] = None
) -> WeatherView:
    if view_mode == ViewMode.CURRENT:
        sample = data.current
        category = sample.category if sample else None
        current = _current_conditions(sample, precision) if sample else None
        forecast = []
    else:
        category = data.daily[0].representative.category if data.daily else None
        current = None
        forecast = [_day_card(summary, precision) for summary in data.daily]

    theme = theme_for_category(category)
    return WeatherView(
        status=status,
        view_mode=view_mode,
        theme=theme,
        theme_class=theme.css_class,
        location=data.city.label(),
        timezone=data.timezone,
        current=current,
        forecast=forecast,
        error=error,
        diagnostics=diagnostics
    )


def _current_conditions(sample: ForecastSample, precision: int) -> CurrentConditions:
    return CurrentConditions(
        temperature=format_celsius(sample.temperature, precision),
        feels_like=format_celsius(sample.feels_like, precision),
        humidity=sample.humidity,
        wind_speed=sample.wind_speed,
        pressure=sample.pressure,
        visibility_km=format_visibility_km(sample.visibility),
        clouds=sample.clouds,
        description=sample.description,
        icon_url=icon_url(sample.icon)
    )


def _day_card(summary: DailySummary, precision: int) -> DayCard:
    sample = summary.representative
    return DayCard(
        date=summary.day.isoformat(),
        label=f"{summary.day:%a, %b} {summary.day.day}",
        temperature=format_celsius(sample.temperature, precision),
        high=format_celsius(summary.daily_max, precision),
        low=format_celsius(summary.daily_min, precision),
        description=sample.description,
        humidity=sample.humidity,
        wind_speed=sample.wind_speed,
        icon_url=icon_url(sample.icon)
    )
