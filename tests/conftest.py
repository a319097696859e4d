"""Shared fixtures for the Travel API Proxy test suite."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config.settings import get_settings


@pytest.fixture
def chat_request_body() -> dict:
    """Standard /ask request body."""
    return {
        "messages": [
            {"role": "system", "content": "You are a helpful travel planner."},
            {"role": "user", "content": "Plan a weekend in Paris."},
        ],
    }


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(RATE_LIMIT_WEATHER="3", AMADEUS_TOKEN_STRATEGY="cached")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()

    yield _override

    # Always clear cache on teardown so other tests get fresh settings
    get_settings.cache_clear()


def make_response(status_code: int = 200, body=None, json_error: bool = False) -> MagicMock:
    """Build a mock httpx.Response."""
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = body if body is not None else {}
    return response


def make_http_client(*responses) -> AsyncMock:
    """Mock httpx.AsyncClient whose request() returns responses in order
    (or raises, when an entry is an exception)."""
    client = AsyncMock()
    client.is_closed = False
    client.request.side_effect = list(responses)
    return client
