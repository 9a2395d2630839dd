"""Abstract base class for geocoding providers (place name -> coordinates)."""

from __future__ import annotations

from abc import abstractmethod

from relieflink.interfaces.provider import IProvider
from relieflink.models.enrichment import GeoLocation


# Concrete implementations: GoogleMapsGeocodingProvider, MapboxGeocodingProvider,
# NominatimGeocodingProvider.  Located in: relieflink/providers/geocoding/
class IGeocodingProvider(IProvider[str, GeoLocation]):
    """Contract for forward-geocoding services."""

    @abstractmethod
    async def fetch(self, request: str) -> GeoLocation:
        """Geocode the place name *request*.

        Returns
        -------
        GeoLocation
            The best match, tagged with this provider's name.
        """
