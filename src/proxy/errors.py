"""Request-scoped failures and the HTTP status each maps to."""


class ProxyError(Exception):
    """Base for failures converted into a JSON ``{"error": ...}`` response."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientInputError(ProxyError):
    """Missing or malformed request input. Never reaches an upstream."""

    status_code = 400


class RateLimitExceeded(ProxyError):
    """The route's fixed window is exhausted for this client key."""

    status_code = 429

    def __init__(self, message: str, limit: int, reset_seconds: float):
        super().__init__(message)
        self.limit = limit
        self.reset_seconds = reset_seconds

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Retry-After": str(int(self.reset_seconds)),
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(int(self.reset_seconds)),
        }


class UpstreamError(Exception):
    """Any transport error, non-success status or unexpected payload from a
    provider. Reasons never include request URLs."""

    def __init__(self, provider: str, reason: str, status_code: int | None = None):
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason
        self.status_code = status_code
