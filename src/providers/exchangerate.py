"""ExchangeRate-API provider."""

from typing import Any
from urllib.parse import quote

from src.config.settings import get_settings
from src.providers.base import UpstreamProvider

DEFAULT_BASE_CURRENCY = "USD"


class ExchangeRateProvider(UpstreamProvider):
    name = "exchangerate"

    async def latest(self, base: str = DEFAULT_BASE_CURRENCY) -> Any:
        """Latest conversion table for a base currency."""
        settings = get_settings()
        # The API key is a path segment on this provider
        url = (
            f"{settings.exchangerate_base_url.rstrip('/')}/v6/"
            f"{quote(settings.exchangerate_api_key, safe='')}/latest/{quote(base.upper(), safe='')}"
        )
        return await self._request_json("GET", url)
