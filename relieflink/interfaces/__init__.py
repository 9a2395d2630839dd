"""Abstract contracts implemented by the adapters under ``relieflink.providers``."""

from relieflink.interfaces.analysis_provider import IContentAnalysisProvider
from relieflink.interfaces.cache_provider import ICacheProvider
from relieflink.interfaces.extraction_provider import ILocationExtractionProvider
from relieflink.interfaces.geocoding_provider import IGeocodingProvider
from relieflink.interfaces.llm_provider import ILLMProvider
from relieflink.interfaces.observer import IObserver
from relieflink.interfaces.provider import IProvider

__all__ = [
    "ICacheProvider",
    "IContentAnalysisProvider",
    "IGeocodingProvider",
    "ILLMProvider",
    "ILocationExtractionProvider",
    "IObserver",
    "IProvider",
]
