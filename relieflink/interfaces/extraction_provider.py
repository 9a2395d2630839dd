"""Abstract base class for location-extraction providers (free text -> place names)."""

from __future__ import annotations

from abc import abstractmethod

from relieflink.interfaces.provider import IProvider
from relieflink.models.enrichment import ExtractedLocations


class ILocationExtractionProvider(IProvider[str, ExtractedLocations]):
    @abstractmethod
    async def fetch(self, request: str) -> ExtractedLocations:
        """Return the location names mentioned in *request*."""
