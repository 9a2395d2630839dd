"""Abstract base class for content-analysis providers."""

from __future__ import annotations

from abc import abstractmethod

from relieflink.interfaces.provider import IProvider
from relieflink.models.enrichment import AnalysisRequest, ContentAnalysis


class IContentAnalysisProvider(IProvider[AnalysisRequest, ContentAnalysis]):
    """Contract for services judging the authenticity of a report."""

    @abstractmethod
    async def fetch(self, request: AnalysisRequest) -> ContentAnalysis:
        """Analyse the report text (and media reference, if any)."""
