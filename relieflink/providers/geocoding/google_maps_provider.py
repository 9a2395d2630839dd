"""Google Maps Geocoding API provider."""

from __future__ import annotations

import httpx
import structlog

from relieflink.config.settings import Settings
from relieflink.interfaces.geocoding_provider import IGeocodingProvider
from relieflink.models.enrichment import GeoLocation
from relieflink.utils.errors import MalformedProviderResponseError, ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


class GoogleMapsGeocodingProvider(IGeocodingProvider):
    """Forward geocoding via Google Maps.  Requires ``GOOGLE_MAPS_API_KEY``."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._api_key = settings.google_maps_api_key
        self._http = http_client
        self.timeout = settings.provider_timeout_seconds

    async def fetch(self, request: str) -> GeoLocation:
        response = await self._http.get(
            _GEOCODE_URL,
            params={"address": request, "key": self._api_key},
            timeout=self.timeout,
        )
        response.raise_for_status()
        data = response.json()

        status = data.get("status")
        results = data.get("results") or []
        if status != "OK" or not results:
            raise ProviderUnavailableError(
                message=f"Google Maps geocoding failed: {status}",
                provider_name=self.get_provider_name(),
            )

        result = results[0]
        try:
            location = result["geometry"]["location"]
            geo = GeoLocation(
                lat=location["lat"],
                lng=location["lng"],
                formatted_address=result["formatted_address"],
                place_id=result.get("place_id"),
                provider=self.get_provider_name(),
            )
        except (KeyError, TypeError) as exc:
            raise MalformedProviderResponseError(
                message=f"Unexpected Google Maps result shape: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.debug("google_maps_geocoded", query=request, place_id=geo.place_id)
        return geo

    def is_available(self) -> bool:
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return "google_maps"
