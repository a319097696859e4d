"""Generic route handler driven by RouteSpec descriptors.

Pipeline: Client key -> Rate limit -> Input validation -> Upstream call -> Response
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from src.logging.audit import (
    RequestTimer,
    client_key_var,
    generate_request_id,
    get_audit_logger,
    request_id_var,
)
from src.providers.registry import close_all_providers
from src.proxy.errors import ClientInputError, ProxyError, RateLimitExceeded, UpstreamError
from src.proxy.routes import BODY, RouteSpec
from src.ratelimit.factory import get_rate_limit_store
from src.ratelimit.keys import client_key_from_request

SERVER_ERROR_MESSAGE = "Server error"


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def extract_params(spec: RouteSpec, raw: dict) -> dict:
    """Select and validate the inputs a route needs.

    Raises ClientInputError when a required input is missing, no
    alternative group is complete, or the route's validator rejects them.
    """
    # Canonical names take precedence over their aliases
    inputs = {k: v for k, v in raw.items() if k not in spec.aliases}
    for alias, canonical in spec.aliases.items():
        if alias in raw:
            inputs.setdefault(canonical, raw[alias])
    inputs = {k: v.strip() if isinstance(v, str) else v for k, v in inputs.items()}

    if not all(_present(inputs.get(name)) for name in spec.required):
        raise ClientInputError(spec.invalid_message)

    selected = list(spec.required)
    if spec.one_of:
        group = next(
            (g for g in spec.one_of if all(_present(inputs.get(name)) for name in g)),
            None,
        )
        if group is None:
            raise ClientInputError(spec.invalid_message)
        selected.extend(group)
    selected.extend(name for name in spec.optional if _present(inputs.get(name)))

    params = {name: inputs[name] for name in selected}
    if spec.validator is not None and not spec.validator(params):
        raise ClientInputError(spec.invalid_message)
    return params


async def _read_input(spec: RouteSpec, request: Request) -> dict:
    if spec.source != BODY:
        return dict(request.query_params)
    try:
        body = await request.json()
    except ValueError:
        raise ClientInputError(spec.invalid_message)
    if not isinstance(body, dict):
        raise ClientInputError(spec.invalid_message)
    return body


async def handle_route(spec: RouteSpec, request: Request) -> JSONResponse:
    """Serve one request for a descriptor-defined route."""
    logger = get_audit_logger()
    rid = generate_request_id()
    request_id_var.set(rid)
    client_key = client_key_from_request(request)
    client_key_var.set(client_key)

    rule = spec.rule()
    rate_result = await get_rate_limit_store().check(spec.name, client_key, rule)
    if not rate_result.allowed:
        logger.warning(
            "Rate limit exceeded",
            extra={"audit_data": {
                "route": spec.name,
                "rate_limit": rate_result.limit,
                "retry_after": rate_result.reset_seconds,
            }},
        )
        raise RateLimitExceeded(rule.message, rate_result.limit, rate_result.reset_seconds)

    try:
        params = extract_params(spec, await _read_input(spec, request))
    except ClientInputError:
        logger.info("Invalid request input", extra={"audit_data": {"route": spec.name}})
        raise

    timer = RequestTimer()
    try:
        with timer:
            payload = await spec.call(params)
    except UpstreamError as e:
        logger.error(
            "Upstream call failed",
            extra={"audit_data": {
                "route": spec.name,
                "provider": e.provider,
                "reason": e.reason,
                "upstream_status": e.status_code,
                "latency_ms": timer.elapsed_ms,
            }},
        )
        raise ProxyError(spec.failure_message) from e
    except Exception as e:
        logger.exception("Unhandled route error", extra={"audit_data": {"route": spec.name}})
        raise ProxyError(SERVER_ERROR_MESSAGE) from e

    logger.info(
        "Request proxied",
        extra={"audit_data": {
            "route": spec.name,
            "latency_ms": timer.elapsed_ms,
            "rate_limit_remaining": rate_result.remaining,
        }},
    )

    return JSONResponse(
        content=payload,
        headers={
            "X-RateLimit-Limit": str(rate_result.limit),
            "X-RateLimit-Remaining": str(rate_result.remaining),
            "X-RateLimit-Reset": str(int(rate_result.reset_seconds)),
            "X-Request-Id": rid,
        },
    )


async def close_client() -> None:
    """Gracefully close all providers on shutdown."""
    await close_all_providers()
