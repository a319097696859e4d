"""Bearer token acquisition strategies for client-credentials providers.

``per_request`` re-authenticates before every resource call. ``cached``
reuses a token until shortly before the expiry the provider reported.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass


@dataclass
class AccessToken:
    value: str
    expires_at: float  # time.monotonic() deadline


TokenFetcher = Callable[[], Awaitable[AccessToken]]


class TokenStrategy(ABC):
    """Decides when a fresh token must be fetched."""

    @abstractmethod
    async def get_token(self, fetch: TokenFetcher) -> str:
        ...

    def invalidate(self) -> None:
        """Forget any held token. No-op for strategies that hold none."""
        pass


class PerRequestTokenStrategy(TokenStrategy):
    async def get_token(self, fetch: TokenFetcher) -> str:
        token = await fetch()
        return token.value


class CachedTokenStrategy(TokenStrategy):
    """Reuses one token across requests until it is about to expire."""

    def __init__(self, expiry_margin_seconds: float = 60.0):
        self._margin = expiry_margin_seconds
        self._token: AccessToken | None = None
        self._lock = asyncio.Lock()

    async def get_token(self, fetch: TokenFetcher) -> str:
        # Serialize refreshes so concurrent requests share a single exchange
        async with self._lock:
            if self._token is None or time.monotonic() >= self._token.expires_at - self._margin:
                self._token = await fetch()
            return self._token.value

    def invalidate(self) -> None:
        self._token = None


def build_token_strategy(name: str) -> TokenStrategy:
    if name == "per_request":
        return PerRequestTokenStrategy()
    if name == "cached":
        return CachedTokenStrategy()
    raise ValueError(f"Unknown token strategy: {name}")
