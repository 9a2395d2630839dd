"""Location enrichment: place names to coordinates, and free text to places.

Two cached fallback chains:

    geocode              Google Maps -> Mapbox -> OpenStreetMap (configurable)
    location_extraction  LLM extraction -> regex patterns

``enrich_location`` may fail (every geocoder down); the failure is returned
as a value and never cached.  ``extract_and_geocode`` always answers: an
unresolvable location simply leaves ``geocoding`` empty.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from relieflink.interfaces.cache_provider import ICacheProvider
from relieflink.interfaces.extraction_provider import ILocationExtractionProvider
from relieflink.interfaces.geocoding_provider import IGeocodingProvider
from relieflink.models.enrichment import ExtractedLocations, GeoLocation, LocationLookup
from relieflink.models.outcome import Outcome, Success
from relieflink.providers.extraction.pattern_location_extractor import PatternLocationExtractor
from relieflink.services.enrichment_service import EnrichmentService
from relieflink.services.fallback_resolver import FallbackResolver
from relieflink.utils.cache_keys import derive_cache_key
from relieflink.utils.logging import get_logger

GEOCODE_NAMESPACE = "geocode"
EXTRACTION_NAMESPACE = "location_extraction"


def _geocode_key(text: str) -> str:
    return derive_cache_key(GEOCODE_NAMESPACE, text=text)


def _extraction_key(text: str) -> str:
    # Not case-folded: the pattern extractor keys off capitalisation.
    return derive_cache_key(EXTRACTION_NAMESPACE, params={"text": " ".join(text.split())})


class LocationService:
    """Resolves locations for disasters, resources and reports.

    Parameters
    ----------
    cache:
        Shared cache store.
    geocoders:
        Geocoding providers in priority order.
    extractors:
        Location-extraction providers in priority order.  The regex
        extractor is appended when not already last, so extraction always
        yields a result.
    geocode_ttl, extraction_ttl:
        Cache lifetimes in seconds.
    provider_timeout:
        Default per-provider timeout in seconds.
    """

    def __init__(
        self,
        cache: ICacheProvider,
        geocoders: Sequence[IGeocodingProvider],
        extractors: Sequence[ILocationExtractionProvider] = (),
        geocode_ttl: int = 3600,
        extraction_ttl: int = 3600,
        provider_timeout: float = 10.0,
    ) -> None:
        self._fallback_extractor = PatternLocationExtractor()
        chain = list(extractors)
        if not chain or not isinstance(chain[-1], PatternLocationExtractor):
            chain.append(self._fallback_extractor)

        self._geocoding: EnrichmentService[str, GeoLocation] = EnrichmentService(
            kind=GEOCODE_NAMESPACE,
            cache=cache,
            resolver=FallbackResolver(GEOCODE_NAMESPACE, timeout=provider_timeout),
            providers=geocoders,
            model=GeoLocation,
            key_fn=_geocode_key,
            ttl=geocode_ttl,
        )
        self._extraction: EnrichmentService[str, ExtractedLocations] = EnrichmentService(
            kind=EXTRACTION_NAMESPACE,
            cache=cache,
            resolver=FallbackResolver(EXTRACTION_NAMESPACE, timeout=provider_timeout),
            providers=chain,
            model=ExtractedLocations,
            key_fn=_extraction_key,
            ttl=extraction_ttl,
            cache_predicate=lambda success: success.provider != self._fallback_extractor.name,
        )
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def enrich_location(self, text: str, ttl: int | None = None) -> Outcome[GeoLocation]:
        """Geocode a place name.  Returns ``Success`` or an aggregate ``Failure``."""
        if not text or not text.strip():
            msg = "Location text must be non-empty"
            raise ValueError(msg)
        return await self._geocoding.enrich(text, ttl=ttl)

    async def extract_locations(self, text: str) -> ExtractedLocations:
        """Pull place names out of free text.  Never fails."""
        outcome = await self._extraction.enrich(text)
        if isinstance(outcome, Success):
            return outcome.payload
        # Only reachable if the regex extractor was cut off by a timeout.
        return self._fallback_extractor.extract(text)

    async def extract_and_geocode(self, text: str) -> LocationLookup:
        """Extract the primary location from *text* and geocode it."""
        extracted = await self.extract_locations(text)

        geocoding: GeoLocation | None = None
        if extracted.primary_location:
            outcome = await self.enrich_location(extracted.primary_location)
            if isinstance(outcome, Success):
                geocoding = outcome.payload
            else:
                self._logger.warning(
                    "location_lookup_unresolved",
                    primary_location=extracted.primary_location,
                    reasons=outcome.reasons,
                )

        self._logger.info(
            "location_lookup_completed",
            primary_location=extracted.primary_location or "no location found",
            geocoded=geocoding is not None,
        )
        return LocationLookup(input_text=text, extracted=extracted, geocoding=geocoding)

    def get_geocoding_providers(self) -> list[str]:
        return self._geocoding.provider_names
