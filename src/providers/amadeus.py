"""Amadeus Self-Service provider: flights, hotels and car rentals.

Every resource call is preceded by an OAuth client-credentials exchange.
Whether the resulting bearer token is reused across requests is decided by
the configured TokenStrategy; the default fetches a new token per call.
"""

import time
from typing import Any

from src.config.settings import get_settings
from src.providers.base import UpstreamProvider
from src.providers.tokens import AccessToken, TokenStrategy, build_token_strategy
from src.proxy.errors import UpstreamError

TOKEN_PATH = "/v1/security/oauth2/token"
FLIGHT_OFFERS_PATH = "/v2/shopping/flight-offers"
HOTEL_OFFERS_PATH = "/v2/shopping/hotel-offers"
CAR_OFFERS_PATH = "/v1/shopping/car-rental-offers"


class AmadeusProvider(UpstreamProvider):
    name = "amadeus"

    def __init__(self, token_strategy: TokenStrategy | None = None):
        super().__init__()
        self._token_strategy = token_strategy or build_token_strategy(
            get_settings().amadeus_token_strategy
        )

    def _url(self, path: str) -> str:
        return f"{get_settings().amadeus_base_url.rstrip('/')}{path}"

    async def _fetch_token(self) -> AccessToken:
        settings = get_settings()
        payload = await self._request_json(
            "POST",
            self._url(TOKEN_PATH),
            data={
                "grant_type": "client_credentials",
                "client_id": settings.amadeus_api_key,
                "client_secret": settings.amadeus_api_secret,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise UpstreamError(self.name, "token response missing access_token")

        try:
            expires_in = float(payload.get("expires_in", 0))
        except (TypeError, ValueError):
            expires_in = 0.0
        return AccessToken(value=payload["access_token"], expires_at=time.monotonic() + expires_in)

    async def _get_authorized(self, path: str, params: dict) -> Any:
        token = await self._token_strategy.get_token(self._fetch_token)
        try:
            return await self._request_json(
                "GET",
                self._url(path),
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except UpstreamError as e:
            if e.status_code == 401:
                self._token_strategy.invalidate()
            raise

    async def search_flights(self, origin: str, destination: str, date: str) -> Any:
        params = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": date,
            "adults": 1,
            "nonStop": "true",
            "max": 5,
        }
        return await self._get_authorized(FLIGHT_OFFERS_PATH, params)

    async def search_hotels(
        self,
        city_code: str | None = None,
        latitude: str | None = None,
        longitude: str | None = None,
    ) -> Any:
        return await self._get_authorized(
            HOTEL_OFFERS_PATH, _location_params(city_code, latitude, longitude)
        )

    async def search_cars(
        self,
        pick_up_date: str,
        drop_off_date: str,
        city_code: str | None = None,
        latitude: str | None = None,
        longitude: str | None = None,
    ) -> Any:
        params = _location_params(city_code, latitude, longitude)
        params.update({"pickUpDate": pick_up_date, "dropOffDate": drop_off_date})
        return await self._get_authorized(CAR_OFFERS_PATH, params)


def _location_params(city_code, latitude, longitude) -> dict:
    """City code wins over coordinates when both are given."""
    if city_code:
        return {"cityCode": city_code}
    return {"latitude": latitude, "longitude": longitude}
