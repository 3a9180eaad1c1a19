import asyncio

import httpx
import pytest
from pydantic import ValidationError

from factories import forecast_data

from owm_forecast.weather.client import ConfigurationError
from owm_forecast.weather.location import (
    LocationResolver, StaticLocationProvider, UnsupportedLocationProvider
)
from owm_forecast.weather.models import Coordinates
from owm_forecast.weather.service import IncompletePayloadError
from owm_forecast.weather.session import (
    Failed, Idle, Loading, Ready, ViewMode, WeatherSession
)

HERE = Coordinates(lat=43.7, lon=-79.4)


def http_error(status_code):
    request = httpx.Request("GET", "https://api.example.test/forecast")
    response = httpx.Response(status_code, request=request, json={"message": "error"})
    return httpx.HTTPStatusError("error", request=request, response=response)


class FakeService:
    """Returns forecast data named after the query, or raises queued errors."""

    def __init__(self, errors=()):
        self.errors = list(errors)
        self.calls = []

    async def get_forecast(self, query, timezone_option="local", tz_name=None):
        self.calls.append((query, timezone_option, tz_name))
        if self.errors:
            raise self.errors.pop(0)
        return forecast_data(city=query.city or "Here")


class GatedService:
    """Holds each city's response until its gate opens."""

    def __init__(self):
        self.gates = {}

    async def get_forecast(self, query, timezone_option="local", tz_name=None):
        # Events are created inside the running loop
        await self.gates.setdefault(query.city, asyncio.Event()).wait()
        return forecast_data(city=query.city)


def make_session(service, provider=None, **kwargs):
    provider = provider or UnsupportedLocationProvider()
    return WeatherSession(service, LocationResolver(provider), default_city="Toronto", **kwargs)


def test_initial_state():
    session = make_session(FakeService())

    assert session.state.load == Idle()
    assert session.state.query is None
    assert session.state.view_mode == ViewMode.CURRENT
    assert session.state.last_location == "Toronto"


def test_start_uses_device_location():
    service = FakeService()
    session = make_session(service, StaticLocationProvider(HERE))

    state = asyncio.run(session.start())

    assert state.query.coordinates == HERE
    assert isinstance(state.load, Ready)
    assert state.diagnostics == ()
    assert service.calls[0][0].city is None


def test_start_falls_back_to_last_location():
    service = FakeService()
    session = make_session(service, UnsupportedLocationProvider("User denied Geolocation"))

    state = asyncio.run(session.start())

    assert state.query.city == "Toronto"
    assert state.diagnostics == ("User denied Geolocation",)
    assert state.load.data.city.name == "Toronto"


def test_location_resolves_before_first_fetch():
    events = []

    class RecordingProvider:
        async def locate(self):
            await asyncio.sleep(0.01)
            events.append("located")
            return HERE

    class RecordingService(FakeService):
        async def get_forecast(self, query, *args):
            events.append("fetched")
            return await super().get_forecast(query, *args)

    asyncio.run(make_session(RecordingService(), RecordingProvider()).start())

    assert events == ["located", "fetched"]


def test_search_replaces_coordinate_query():
    session = make_session(FakeService(), StaticLocationProvider(HERE))

    async def scenario():
        await session.start()
        return await session.search("  Oslo ")

    state = asyncio.run(scenario())

    assert state.query.city == "Oslo"
    assert state.query.coordinates is None
    assert state.last_location == "Oslo"
    assert state.load.data.city.name == "Oslo"


def test_blank_search_is_rejected():
    session = make_session(FakeService())

    with pytest.raises(ValidationError):
        asyncio.run(session.search(" "))
    assert session.state.load == Idle()


def test_use_coordinates():
    session = make_session(FakeService())

    state = asyncio.run(session.use_coordinates(HERE))

    assert state.query.coordinates == HERE


def test_view_mode_toggle():
    session = make_session(FakeService())

    assert session.set_view_mode("forecast").view_mode == ViewMode.FORECAST
    assert session.set_view_mode(ViewMode.CURRENT).view_mode == ViewMode.CURRENT
    with pytest.raises(ValueError):
        session.set_view_mode("hourly")


def test_loading_state_while_fetching():
    service = GatedService()
    session = make_session(service)

    async def scenario():
        task = asyncio.create_task(session.search("Oslo"))
        await asyncio.sleep(0)
        during = session.state.load
        service.gates["Oslo"].set()
        await task
        return during

    assert asyncio.run(scenario()) == Loading()
    assert isinstance(session.state.load, Ready)


@pytest.mark.parametrize("error, status_code, reason", [
    (http_error(404), 404, "Location not found: Nowhere"),
    (http_error(401), 401, "rejected the API key"),
    (http_error(500), 500, "HTTP 500"),
    (httpx.ConnectError("refused"), None, "unreachable"),
    (IncompletePayloadError("Forecast payload is missing: city"), None, "missing: city"),
    (ValueError("bad"), None, "Invalid forecast data"),
    (ConfigurationError("OpenWeatherMap API key is not configured"), None, "not configured"),
])
def test_failures_become_failed_state(error, status_code, reason):
    session = make_session(FakeService(errors=[error]))

    state = asyncio.run(session.search("Nowhere"))

    assert isinstance(state.load, Failed)
    assert state.load.status_code == status_code
    assert reason in state.load.reason
    assert state.load.previous is None


def test_missing_configuration_is_not_reported_as_bad_data():
    error = ConfigurationError("OpenWeatherMap API key is not configured")
    session = make_session(FakeService(errors=[error]))

    state = asyncio.run(session.search("Toronto"))

    assert state.load.reason == "Weather service is not configured: OpenWeatherMap API key is not configured"
    assert "Invalid forecast data" not in state.load.reason


def test_failure_keeps_previous_result():
    session = make_session(FakeService())

    async def scenario():
        await session.search("Oslo")
        session.service.errors.append(http_error(503))
        return await session.search("Bergen")

    state = asyncio.run(scenario())

    assert isinstance(state.load, Failed)
    assert state.load.previous.data.city.name == "Oslo"
    assert state.query.city == "Bergen"


def test_stale_response_is_discarded():
    service = GatedService()
    session = make_session(service)

    async def scenario():
        slow = asyncio.create_task(session.search("Paris"))
        await asyncio.sleep(0)
        fast = asyncio.create_task(session.search("Oslo"))
        await asyncio.sleep(0)
        service.gates["Oslo"].set()
        await fast
        service.gates["Paris"].set()
        await slow

    asyncio.run(scenario())

    assert session.state.query.city == "Oslo"
    assert session.state.load.data.city.name == "Oslo"


def test_timezone_settings_are_passed_through():
    service = FakeService()
    session = make_session(service, timezone_option="location", tz_name="Europe/Oslo")

    asyncio.run(session.search("Oslo"))

    assert service.calls[0][1:] == ("location", "Europe/Oslo")
