"""Tests for the single-call providers — weather, events and currency."""

import pytest

from src.providers.exchangerate import ExchangeRateProvider
from src.providers.openweather import OpenWeatherProvider
from src.providers.ticketmaster import TicketmasterProvider
from tests.conftest import make_http_client, make_response


@pytest.fixture(autouse=True)
def provider_settings(override_settings):
    override_settings(
        OPENWEATHER_API_KEY="ow-key",
        TICKETMASTER_API_KEY="tm-key",
        EXCHANGERATE_API_KEY="fx-key",
    )


class TestOpenWeather:

    async def test_current_weather(self):
        provider = OpenWeatherProvider()
        payload = {"name": "Paris", "main": {"temp": 18.2}}
        provider._client = make_http_client(make_response(200, payload))

        assert await provider.current_weather("Paris") == payload

        args, kwargs = provider._client.request.call_args
        assert args == ("GET", "https://api.openweathermap.org/data/2.5/weather")
        assert kwargs["params"] == {"q": "Paris", "appid": "ow-key", "units": "metric"}


class TestTicketmaster:

    async def test_events_passthrough(self):
        provider = TicketmasterProvider()
        payload = {"_embedded": {"events": [{"name": "Concert"}]}, "page": {"size": 20}}
        provider._client = make_http_client(make_response(200, payload))

        assert await provider.events("Berlin") == payload

        args, kwargs = provider._client.request.call_args
        assert args == ("GET", "https://app.ticketmaster.com/discovery/v2/events.json")
        assert kwargs["params"] == {"apikey": "tm-key", "city": "Berlin"}


class TestExchangeRate:

    async def test_latest_defaults_to_usd(self):
        provider = ExchangeRateProvider()
        payload = {"result": "success", "base_code": "USD", "conversion_rates": {"EUR": 0.92}}
        provider._client = make_http_client(make_response(200, payload))

        assert await provider.latest() == payload

        args, _ = provider._client.request.call_args
        assert args == ("GET", "https://v6.exchangerate-api.com/v6/fx-key/latest/USD")

    async def test_latest_other_base(self):
        provider = ExchangeRateProvider()
        provider._client = make_http_client(make_response(200, {}))

        await provider.latest("eur")

        args, _ = provider._client.request.call_args
        assert args[1].endswith("/latest/EUR")
