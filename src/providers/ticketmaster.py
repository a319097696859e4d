"""Ticketmaster Discovery API provider."""

from typing import Any

from src.config.settings import get_settings
from src.providers.base import UpstreamProvider


class TicketmasterProvider(UpstreamProvider):
    name = "ticketmaster"

    async def events(self, city: str) -> Any:
        """Events listed for a city, as the full Discovery payload."""
        settings = get_settings()
        url = f"{settings.ticketmaster_base_url.rstrip('/')}/discovery/v2/events.json"
        params = {"apikey": settings.ticketmaster_api_key, "city": city}
        return await self._request_json("GET", url, params=params)
