"""Cache-fronted enrichment.

Composes the three building blocks every enrichment kind shares:

    derive key -> cache get -> (hit) return cached payload
                            -> (miss) FallbackResolver.resolve
                                      -> Success: cache with TTL, return
                                      -> Failure: return as-is, cache nothing

Failures are never written to the cache, so a provider outage is retried on
the very next request instead of being pinned for a whole TTL window.  The
optional ``cache_predicate`` extends that to degraded answers (e.g. a
heuristic fallback) that should not displace a later, better result.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from relieflink.interfaces.cache_provider import ICacheProvider
from relieflink.models.outcome import Failure, FailureKind, Outcome, Success
from relieflink.services.fallback_resolver import FallbackResolver, ProviderFn, provider_name
from relieflink.utils.errors import CacheUnavailableError
from relieflink.utils.logging import get_logger

RequestT = TypeVar("RequestT")
ModelT = TypeVar("ModelT", bound=BaseModel)


class EnrichmentService(Generic[RequestT, ModelT]):
    """Memoised fallback-chain enrichment for one payload model.

    Parameters
    ----------
    kind:
        Enrichment kind, used for log records.
    cache:
        Shared cache store.
    resolver:
        Fallback resolver carrying the per-provider timeout.
    providers:
        Provider chain in priority order.
    model:
        Pydantic model the payload is validated into, both when a provider
        answers and when a cached value is read back.
    key_fn:
        Maps a request to its cache key.
    ttl:
        Default time-to-live in seconds for cached payloads.
    cache_predicate:
        Returns ``False`` for successes that must not be cached.
    """

    def __init__(
        self,
        kind: str,
        cache: ICacheProvider,
        resolver: FallbackResolver,
        providers: Sequence[ProviderFn[RequestT, Any]],
        model: type[ModelT],
        key_fn: Callable[[RequestT], str],
        ttl: int,
        cache_predicate: Callable[[Success[ModelT]], bool] | None = None,
    ) -> None:
        if ttl <= 0:
            msg = f"Enrichment TTL must be positive, got {ttl}"
            raise ValueError(msg)
        self._kind = kind
        self._cache = cache
        self._resolver = resolver
        self._providers = list(providers)
        self._model = model
        self._key_fn = key_fn
        self._ttl = ttl
        self._cache_predicate = cache_predicate
        self._logger: structlog.BoundLogger = get_logger(__name__).bind(kind=kind)

    @property
    def provider_names(self) -> list[str]:
        return [provider_name(p) for p in self._providers]

    def cache_key(self, request: RequestT) -> str:
        return self._key_fn(request)

    async def enrich(self, request: RequestT, ttl: int | None = None) -> Outcome[ModelT]:
        """Return the enrichment for *request*, from cache when possible."""
        key = self._key_fn(request)

        cached = await self._read_cache(key)
        if cached is not None:
            self._logger.debug("enrichment_cache_hit", key=key)
            return Success(payload=cached, provider=self._provenance(cached), cached=True)

        outcome = await self._resolver.resolve(request, self._providers)
        if isinstance(outcome, Failure):
            self._logger.warning("enrichment_failed", key=key, reasons=outcome.reasons)
            return outcome

        try:
            payload = self._coerce(outcome.payload)
        except ValidationError as exc:
            failure = Failure(
                kind=FailureKind.MALFORMED_RESPONSE,
                reason=f"payload does not match {self._model.__name__}: {exc.error_count()} errors",
                provider=outcome.provider,
            )
            self._logger.warning("enrichment_payload_invalid", key=key, provider=outcome.provider)
            return Failure.aggregate([failure], reason=failure.reason)

        success = Success(payload=payload, provider=outcome.provider)
        if self._cache_predicate is None or self._cache_predicate(success):
            await self._write_cache(key, payload, ttl or self._ttl)
        else:
            self._logger.debug("enrichment_not_cached", key=key, provider=success.provider)

        self._logger.info("enrichment_resolved", key=key, provider=success.provider)
        return success

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _coerce(self, payload: Any) -> ModelT:
        if isinstance(payload, self._model):
            return payload
        return self._model.model_validate(payload)

    @staticmethod
    def _provenance(payload: BaseModel) -> str:
        return str(getattr(payload, "provider", None) or "cache")

    async def _read_cache(self, key: str) -> ModelT | None:
        try:
            raw = await self._cache.get(key)
        except CacheUnavailableError as exc:
            self._logger.warning("cache_unavailable", operation="get", key=key, error=str(exc))
            return None
        if raw is None:
            return None

        try:
            return self._model.model_validate(raw)
        except ValidationError:
            # Shape changed since the entry was written; recompute.
            self._logger.warning("cache_entry_stale_shape", key=key)
            await self._cache.delete(key)
            return None

    async def _write_cache(self, key: str, payload: ModelT, ttl: int) -> None:
        try:
            await self._cache.set(key, payload.model_dump(mode="json"), ttl)
        except CacheUnavailableError as exc:
            self._logger.warning("cache_unavailable", operation="set", key=key, error=str(exc))
