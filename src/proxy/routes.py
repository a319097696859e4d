"""Route descriptors — one RouteSpec per proxied endpoint.

A descriptor names the inputs a route needs, the limiter messages, and the
provider call that produces its response body. The generic handler in
src.proxy.handler turns each descriptor into an endpoint.
"""

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from src.config.settings import get_settings
from src.providers.exchangerate import DEFAULT_BASE_CURRENCY
from src.providers.registry import get_provider
from src.ratelimit.models import RateLimitRule

QUERY = "query"
BODY = "body"


@dataclass(frozen=True)
class RouteSpec:
    name: str
    method: str
    path: str
    call: Callable[[dict], Awaitable[Any]]
    limit_message: str
    failure_message: str
    invalid_message: str = "Invalid request"
    required: tuple[str, ...] = ()
    one_of: tuple[tuple[str, ...], ...] = ()  # at least one group must be complete
    optional: tuple[str, ...] = ()
    aliases: dict[str, str] = field(default_factory=dict)  # alternate name -> canonical
    source: str = QUERY
    validator: Callable[[dict], bool] | None = None

    def rule(self) -> RateLimitRule:
        settings = get_settings()
        return RateLimitRule(
            max_requests=settings.route_limit(self.name),
            window_seconds=settings.rate_limit_window_seconds,
            message=self.limit_message,
        )


# --- validators ---

def _valid_history(params: dict) -> bool:
    messages = params["messages"]
    if not isinstance(messages, list) or not messages:
        return False
    for turn in messages:
        if not isinstance(turn, dict):
            return False
        role = turn.get("role")
        if not isinstance(role, str) or not role.strip():
            return False
        if not isinstance(turn.get("content"), str):
            return False
    return True


def _parse_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _valid_coordinates(params: dict) -> bool:
    if "lat" not in params:
        return True
    try:
        lat, lon = float(params["lat"]), float(params["lon"])
    except ValueError:
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def _valid_flight_search(params: dict) -> bool:
    return _parse_date(params["date"]) is not None


def _valid_car_search(params: dict) -> bool:
    pick_up = _parse_date(params["pickUpDate"])
    drop_off = _parse_date(params["dropOffDate"])
    if pick_up is None or drop_off is None or drop_off < pick_up:
        return False
    return _valid_coordinates(params)


_CURRENCY_CODE = re.compile(r"^[A-Za-z]{3}$")


def _valid_currency(params: dict) -> bool:
    return "base" not in params or bool(_CURRENCY_CODE.match(params["base"]))


# --- provider calls ---

async def _ask(params: dict) -> dict:
    messages = [{"role": m["role"], "content": m["content"]} for m in params["messages"]]
    reply = await get_provider("openai").complete(messages)
    return {"reply": reply}


async def _weather(params: dict) -> Any:
    return await get_provider("openweather").current_weather(params["city"])


async def _events(params: dict) -> Any:
    return await get_provider("ticketmaster").events(params["city"])


async def _flights(params: dict) -> Any:
    return await get_provider("amadeus").search_flights(
        origin=params["origin"],
        destination=params["destination"],
        date=params["date"],
    )


async def _hotels(params: dict) -> Any:
    return await get_provider("amadeus").search_hotels(
        city_code=params.get("cityCode"),
        latitude=params.get("lat"),
        longitude=params.get("lon"),
    )


async def _cars(params: dict) -> Any:
    return await get_provider("amadeus").search_cars(
        pick_up_date=params["pickUpDate"],
        drop_off_date=params["dropOffDate"],
        city_code=params.get("cityCode"),
        latitude=params.get("lat"),
        longitude=params.get("lon"),
    )


async def _currency(params: dict) -> Any:
    return await get_provider("exchangerate").latest(params.get("base", DEFAULT_BASE_CURRENCY))


_COORDINATE_ALIASES = {"latitude": "lat", "longitude": "lon"}

ROUTES: tuple[RouteSpec, ...] = (
    RouteSpec(
        name="ask",
        method="POST",
        path="/ask",
        call=_ask,
        source=BODY,
        required=("messages",),
        validator=_valid_history,
        limit_message="Daily chat limit reached.",
        invalid_message="Invalid message history.",
        failure_message="Invalid OpenAI response",
    ),
    RouteSpec(
        name="weather",
        method="GET",
        path="/weather",
        call=_weather,
        required=("city",),
        limit_message="Daily weather limit reached.",
        invalid_message="City required",
        failure_message="Weather API error",
    ),
    RouteSpec(
        name="events",
        method="GET",
        path="/events",
        call=_events,
        required=("city",),
        limit_message="Event lookup limit reached.",
        invalid_message="City required",
        failure_message="Event API error",
    ),
    RouteSpec(
        name="flights",
        method="GET",
        path="/flights",
        call=_flights,
        required=("origin", "destination", "date"),
        aliases={"dep": "origin", "arr": "destination"},
        validator=_valid_flight_search,
        limit_message="Flight API limit reached.",
        invalid_message="Missing flight search parameters",
        failure_message="Flight API error",
    ),
    RouteSpec(
        name="hotels",
        method="GET",
        path="/hotels",
        call=_hotels,
        one_of=(("cityCode",), ("lat", "lon")),
        aliases=_COORDINATE_ALIASES,
        validator=_valid_coordinates,
        limit_message="Hotel API limit reached.",
        invalid_message="City code or coordinates required",
        failure_message="Hotel API error",
    ),
    RouteSpec(
        name="cars",
        method="GET",
        path="/cars",
        call=_cars,
        required=("pickUpDate", "dropOffDate"),
        one_of=(("cityCode",), ("lat", "lon")),
        aliases=_COORDINATE_ALIASES,
        validator=_valid_car_search,
        limit_message="Car rental API limit reached.",
        invalid_message="Missing car rental search parameters",
        failure_message="Car rental API error",
    ),
    RouteSpec(
        name="currency",
        method="GET",
        path="/currency",
        call=_currency,
        optional=("base",),
        validator=_valid_currency,
        limit_message="Currency API limit reached.",
        invalid_message="Invalid base currency",
        failure_message="Currency API error",
    ),
)
