"""OpenWeatherMap current-weather provider."""

from typing import Any

from src.config.settings import get_settings
from src.providers.base import UpstreamProvider


class OpenWeatherProvider(UpstreamProvider):
    name = "openweather"

    async def current_weather(self, city: str) -> Any:
        settings = get_settings()
        url = f"{settings.openweather_base_url.rstrip('/')}/data/2.5/weather"
        params = {"q": city, "appid": settings.openweather_api_key, "units": "metric"}
        return await self._request_json("GET", url, params=params)
