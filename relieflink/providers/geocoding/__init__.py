"""Geocoding providers, listed in default priority order.

Google Maps and Mapbox need credentials; OpenStreetMap Nominatim is free
and unauthenticated, so it sits last as the always-configured fallback.
"""

from relieflink.providers.geocoding.google_maps_provider import GoogleMapsGeocodingProvider
from relieflink.providers.geocoding.mapbox_provider import MapboxGeocodingProvider
from relieflink.providers.geocoding.nominatim_provider import NominatimGeocodingProvider

__all__ = [
    "GoogleMapsGeocodingProvider",
    "MapboxGeocodingProvider",
    "NominatimGeocodingProvider",
]
