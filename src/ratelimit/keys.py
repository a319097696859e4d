"""Client key derivation for rate limit partitioning."""

from fastapi import Request

FORWARDED_FOR_HEADER = "x-forwarded-for"


def client_key_from_request(request: Request) -> str:
    """Resolve the rate-limit key for a request.

    Only the first X-Forwarded-For entry is trusted; without the header the
    connection's remote address is used.
    """
    forwarded = request.headers.get(FORWARDED_FOR_HEADER, "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
