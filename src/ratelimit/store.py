"""Rate limit store abstraction + in-memory fixed window implementation.

Counters are partitioned by (route, client key). Each partition holds one
fixed window: the first request opens it with a count of 1, later requests
increment the count until the rule's maximum is reached, and the window is
replaced by a fresh one once its duration has elapsed.

Rejected requests are not counted, so a window's count never exceeds the
rule's maximum.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from src.ratelimit.models import RateLimitResult, RateLimitRule, RateLimitWindow


class RateLimitStore(ABC):
    """Abstract base for fixed-window counter backends."""

    @abstractmethod
    async def check(self, route: str, client_key: str, rule: RateLimitRule) -> RateLimitResult:
        """Count a request against the (route, client key) window."""
        ...

    @abstractmethod
    async def reset(self, route: str, client_key: str) -> None:
        """Drop the window for a (route, client key) pair."""
        ...


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local windows.

    The read-modify-write in check() never awaits, so it runs atomically on
    the event loop. Counters are not shared between server instances.
    """

    def __init__(self, clock: Callable[[], float] | None = None):
        self._windows: dict[tuple[str, str], RateLimitWindow] = {}
        self._clock = clock

    async def check(self, route: str, client_key: str, rule: RateLimitRule) -> RateLimitResult:
        now = self._clock() if self._clock else time.monotonic()
        key = (route, client_key)
        window = self._windows.get(key)

        if window is None or now - window.started_at >= rule.window_seconds:
            window = RateLimitWindow(started_at=now, count=1)
            self._windows[key] = window
            return _result(True, rule, window.count, window.started_at, now)

        if window.count >= rule.max_requests:
            return _result(False, rule, window.count, window.started_at, now)

        window.count += 1
        return _result(True, rule, window.count, window.started_at, now)

    async def reset(self, route: str, client_key: str) -> None:
        self._windows.pop((route, client_key), None)

    def clear(self) -> None:
        """Drop every window. Useful for testing."""
        self._windows.clear()


def _result(allowed: bool, rule: RateLimitRule, count: int, started_at: float, now: float) -> RateLimitResult:
    reset = max(0.0, started_at + rule.window_seconds - now)
    return RateLimitResult(
        allowed=allowed,
        limit=rule.max_requests,
        remaining=max(0, rule.max_requests - count),
        reset_seconds=round(reset, 1),
    )
