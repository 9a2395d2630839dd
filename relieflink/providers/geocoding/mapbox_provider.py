"""Mapbox Geocoding v5 provider."""

from __future__ import annotations

from urllib.parse import quote

import httpx
import structlog

from relieflink.config.settings import Settings
from relieflink.interfaces.geocoding_provider import IGeocodingProvider
from relieflink.models.enrichment import GeoLocation
from relieflink.utils.errors import MalformedProviderResponseError, ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_PLACES_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places/{query}.json"


class MapboxGeocodingProvider(IGeocodingProvider):
    """Forward geocoding via Mapbox.  Requires ``MAPBOX_ACCESS_TOKEN``.

    Mapbox returns ``center`` as ``[longitude, latitude]``.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._access_token = settings.mapbox_access_token
        self._http = http_client
        self.timeout = settings.provider_timeout_seconds

    async def fetch(self, request: str) -> GeoLocation:
        response = await self._http.get(
            _PLACES_URL.format(query=quote(request, safe="")),
            params={"access_token": self._access_token, "limit": 1},
            timeout=self.timeout,
        )
        response.raise_for_status()
        features = response.json().get("features") or []
        if not features:
            raise ProviderUnavailableError(
                message="Mapbox geocoding returned no results",
                provider_name=self.get_provider_name(),
            )

        feature = features[0]
        try:
            lng, lat = feature["center"][0], feature["center"][1]
            geo = GeoLocation(
                lat=lat,
                lng=lng,
                formatted_address=feature["place_name"],
                place_id=feature.get("id"),
                provider=self.get_provider_name(),
            )
        except (KeyError, IndexError, TypeError) as exc:
            raise MalformedProviderResponseError(
                message=f"Unexpected Mapbox feature shape: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.debug("mapbox_geocoded", query=request, place_id=geo.place_id)
        return geo

    def is_available(self) -> bool:
        return bool(self._access_token)

    def get_provider_name(self) -> str:
        return "mapbox"
