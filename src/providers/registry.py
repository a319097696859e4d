"""Provider registry — singleton map of provider name → instance."""

from src.providers.amadeus import AmadeusProvider
from src.providers.base import UpstreamProvider
from src.providers.exchangerate import ExchangeRateProvider
from src.providers.openai import OpenAIProvider
from src.providers.openweather import OpenWeatherProvider
from src.providers.ticketmaster import TicketmasterProvider

_factories = {
    "openai": OpenAIProvider,
    "openweather": OpenWeatherProvider,
    "ticketmaster": TicketmasterProvider,
    "amadeus": AmadeusProvider,
    "exchangerate": ExchangeRateProvider,
}

_providers: dict[str, UpstreamProvider] = {}


def get_provider(name: str) -> UpstreamProvider:
    """Get or create a provider instance by name."""
    if name in _providers:
        return _providers[name]

    factory = _factories.get(name)
    if factory is None:
        raise ValueError(f"Unknown provider: {name}")

    _providers[name] = factory()
    return _providers[name]


async def close_all_providers() -> None:
    """Gracefully shut down all provider connections."""
    for provider in _providers.values():
        await provider.close()
    _providers.clear()
