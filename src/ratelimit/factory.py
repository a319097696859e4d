"""Factory for rate limit store backends."""

from src.config.settings import get_settings
from src.ratelimit.store import InMemoryRateLimitStore, RateLimitStore

_store: RateLimitStore | None = None


def get_rate_limit_store() -> RateLimitStore:
    """Get the rate limit store singleton, building it from settings."""
    global _store
    if _store is not None:
        return _store

    settings = get_settings()
    backend = settings.rate_limit_backend

    if backend == "memory":
        _store = InMemoryRateLimitStore()
    elif backend == "dynamodb":
        # Lazy import to avoid boto3 dependency when not needed
        from src.ratelimit.dynamodb_store import DynamoDBRateLimitStore
        _store = DynamoDBRateLimitStore(
            table_name=settings.dynamodb_table_name,
            region=settings.aws_region,
        )
    else:
        raise ValueError(f"Unknown rate limit backend: {backend}")

    return _store


def set_rate_limit_store(store: RateLimitStore | None) -> None:
    """Inject a store (or None to rebuild from settings on next use)."""
    global _store
    _store = store
