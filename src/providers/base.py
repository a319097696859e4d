"""Shared plumbing for upstream API providers."""

from typing import Any

import httpx

from src.config.settings import get_settings
from src.proxy.errors import UpstreamError


class UpstreamProvider:
    """Base class for provider clients.

    Each provider owns one lazily created httpx.AsyncClient. Every call is a
    single attempt: transport errors, timeouts, non-2xx statuses and non-JSON
    bodies all surface as UpstreamError.
    """

    name = "upstream"

    def __init__(self):
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            settings = get_settings()
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    settings.upstream_timeout_seconds,
                    connect=settings.upstream_connect_timeout_seconds,
                )
            )
        return self._client

    async def _request_json(self, method: str, url: str, **kwargs) -> Any:
        """Issue one request and return the decoded JSON body.

        Error reasons deliberately omit the URL: several providers take their
        credentials in the query string or path.
        """
        client = await self._get_client()
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.ConnectError:
            raise UpstreamError(self.name, "cannot reach provider")
        except httpx.TimeoutException:
            raise UpstreamError(self.name, "provider timed out")
        except httpx.HTTPError as e:
            raise UpstreamError(self.name, f"transport error ({type(e).__name__})")

        if not 200 <= response.status_code < 300:
            raise UpstreamError(
                self.name, f"HTTP {response.status_code}", status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError:
            raise UpstreamError(self.name, "response is not valid JSON", status_code=response.status_code)

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
