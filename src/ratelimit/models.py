"""Rate limit rule, window and check result models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitRule:
    max_requests: int
    window_seconds: float
    message: str = "Too many requests."


@dataclass
class RateLimitWindow:
    started_at: float
    count: int = 1


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: float
