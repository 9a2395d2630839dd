"""OpenStreetMap Nominatim provider.

Free and keyless, but the usage policy requires an identifying
User-Agent and at most one request per second.  The throttle below
enforces the rate for this process.
"""

from __future__ import annotations

import asyncio
import time

import httpx
import structlog

from relieflink.config.settings import Settings
from relieflink.interfaces.geocoding_provider import IGeocodingProvider
from relieflink.models.enrichment import GeoLocation
from relieflink.utils.errors import MalformedProviderResponseError, ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_SEARCH_URL = "https://nominatim.openstreetmap.org/search"


class NominatimGeocodingProvider(IGeocodingProvider):
    """Forward geocoding via OpenStreetMap Nominatim."""

    _MIN_REQUEST_INTERVAL: float = 1.0  # seconds between requests

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._user_agent = settings.nominatim_user_agent
        self._http = http_client
        self.timeout = settings.provider_timeout_seconds
        self._last_request_time: float = 0.0
        self._throttle_lock = asyncio.Lock()

    async def _throttle(self) -> None:
        async with self._throttle_lock:
            elapsed = time.monotonic() - self._last_request_time
            if elapsed < self._MIN_REQUEST_INTERVAL:
                await asyncio.sleep(self._MIN_REQUEST_INTERVAL - elapsed)
            self._last_request_time = time.monotonic()

    async def fetch(self, request: str) -> GeoLocation:
        await self._throttle()
        response = await self._http.get(
            _SEARCH_URL,
            params={"format": "json", "q": request, "limit": 1},
            headers={"User-Agent": self._user_agent},
            timeout=self.timeout,
        )
        response.raise_for_status()
        results = response.json()
        if not isinstance(results, list) or not results:
            raise ProviderUnavailableError(
                message="OpenStreetMap geocoding returned no results",
                provider_name=self.get_provider_name(),
            )

        result = results[0]
        try:
            place_id = result.get("place_id")
            geo = GeoLocation(
                lat=float(result["lat"]),
                lng=float(result["lon"]),
                formatted_address=result["display_name"],
                place_id=str(place_id) if place_id is not None else None,
                provider=self.get_provider_name(),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedProviderResponseError(
                message=f"Unexpected Nominatim result shape: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.debug("nominatim_geocoded", query=request, place_id=geo.place_id)
        return geo

    def is_available(self) -> bool:
        return bool(self._user_agent)

    def get_provider_name(self) -> str:
        return "openstreetmap"
