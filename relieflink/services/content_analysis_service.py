"""Content analysis: authenticity verdicts for report text and images.

Chain: configured generative providers, then the heuristic floor.  Because
the heuristic never fails, :meth:`ContentAnalysisService.analyze` always
returns a :class:`ContentAnalysis`; callers never branch on provenance.

Only generative verdicts are cached.  A heuristic answer means the primary
provider was unavailable, and the next request should try it again.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from relieflink.interfaces.analysis_provider import IContentAnalysisProvider
from relieflink.interfaces.cache_provider import ICacheProvider
from relieflink.models.enrichment import AnalysisRequest, ContentAnalysis
from relieflink.models.outcome import Success
from relieflink.providers.analysis.heuristic_provider import HeuristicAnalysisProvider
from relieflink.services.enrichment_service import EnrichmentService
from relieflink.services.fallback_resolver import FallbackResolver
from relieflink.utils.cache_keys import derive_cache_key
from relieflink.utils.logging import get_logger

CONTENT_ANALYSIS_NAMESPACE = "content_analysis"


def _analysis_key(request: AnalysisRequest) -> str:
    return derive_cache_key(
        CONTENT_ANALYSIS_NAMESPACE,
        params={"text": " ".join(request.text.split()), "media_ref": request.media_ref},
    )


class ContentAnalysisService:
    """Never-failing content analysis with a generative primary."""

    def __init__(
        self,
        cache: ICacheProvider,
        providers: Sequence[IContentAnalysisProvider] = (),
        ttl: int = 3600,
        provider_timeout: float = 30.0,
    ) -> None:
        self._heuristic = HeuristicAnalysisProvider()
        self._enrichment: EnrichmentService[AnalysisRequest, ContentAnalysis] = EnrichmentService(
            kind=CONTENT_ANALYSIS_NAMESPACE,
            cache=cache,
            resolver=FallbackResolver(CONTENT_ANALYSIS_NAMESPACE, timeout=provider_timeout),
            providers=[*providers, self._heuristic],
            model=ContentAnalysis,
            key_fn=_analysis_key,
            ttl=ttl,
            cache_predicate=lambda success: success.provider != self._heuristic.name,
        )
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def analyze(
        self,
        text: str,
        media_ref: str | None = None,
        ttl: int | None = None,
    ) -> ContentAnalysis:
        request = AnalysisRequest(text=text, media_ref=media_ref)
        outcome = await self._enrichment.enrich(request, ttl=ttl)
        if isinstance(outcome, Success):
            return outcome.payload

        # Unreachable unless the heuristic itself was timed out; answer inline.
        self._logger.warning("content_analysis_floor_inline", reasons=outcome.reasons)
        return self._heuristic.analyze(request)

    def get_providers(self) -> list[str]:
        return self._enrichment.provider_names
