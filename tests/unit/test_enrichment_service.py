"""Unit tests for the cache-fronted EnrichmentService."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import BaseModel, ConfigDict

from relieflink.interfaces.cache_provider import ICacheProvider
from relieflink.models.outcome import Failure, FailureKind, Success
from relieflink.providers.cache.memory_cache import MemoryCacheStore
from relieflink.services.enrichment_service import EnrichmentService
from relieflink.services.fallback_resolver import FallbackResolver
from relieflink.utils.cache_keys import derive_cache_key
from relieflink.utils.errors import CacheUnavailableError


# ======================================================================
# Shared helpers
# ======================================================================


class _Answer(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    provider: str


class _CountingProvider:
    """Provider function that answers (or fails) and counts its calls."""

    def __init__(self, name: str, value: str | None = None, payload: Any = None) -> None:
        self.name = name
        self._value = value
        self._payload = payload
        self.calls = 0

    async def __call__(self, request: str):
        self.calls += 1
        if self._payload is not None:
            return Success(payload=self._payload, provider=self.name)
        if self._value is None:
            return Failure(FailureKind.PROVIDER_UNAVAILABLE, "down", provider=self.name)
        return Success(payload={"value": self._value, "provider": self.name}, provider=self.name)


class _BrokenCache(ICacheProvider):
    async def get(self, key: str) -> Any | None:
        raise CacheUnavailableError("disk gone", provider_name="broken")

    async def set(self, key: str, value: Any, ttl: int) -> None:
        raise CacheUnavailableError("disk gone", provider_name="broken")

    async def delete(self, key: str) -> None:
        return None

    async def exists(self, key: str) -> bool:
        return False

    async def sweep(self) -> int:
        return 0

    def get_provider_name(self) -> str:
        return "broken"


def _key(request: str) -> str:
    return derive_cache_key("test", text=request)


def _service(
    cache: ICacheProvider,
    providers: list[_CountingProvider],
    ttl: int = 60,
    cache_predicate=None,
) -> EnrichmentService[str, _Answer]:
    return EnrichmentService(
        kind="test",
        cache=cache,
        resolver=FallbackResolver("test", timeout=1.0),
        providers=providers,
        model=_Answer,
        key_fn=_key,
        ttl=ttl,
        cache_predicate=cache_predicate,
    )


# ======================================================================
# EnrichmentService
# ======================================================================


class TestEnrichmentService:
    @pytest.mark.asyncio
    async def test_miss_resolves_and_caches(self, memory_cache: MemoryCacheStore) -> None:
        provider = _CountingProvider("B", value="X")
        outcome = await _service(memory_cache, [provider]).enrich("query")

        assert isinstance(outcome, Success)
        assert outcome.payload == _Answer(value="X", provider="B")
        assert outcome.cached is False
        assert await memory_cache.get(_key("query")) == {"value": "X", "provider": "B"}

    @pytest.mark.asyncio
    async def test_hit_skips_providers(self, memory_cache: MemoryCacheStore) -> None:
        provider = _CountingProvider("B", value="X")
        service = _service(memory_cache, [provider])

        await service.enrich("query")
        second = await service.enrich("query")

        assert provider.calls == 1
        assert isinstance(second, Success)
        assert second.cached is True
        assert second.provider == "B"
        assert second.payload.value == "X"

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, memory_cache: MemoryCacheStore) -> None:
        a = _CountingProvider("A")
        b = _CountingProvider("B")
        service = _service(memory_cache, [a, b])

        outcome = await service.enrich("query")

        assert isinstance(outcome, Failure)
        assert outcome.reasons == ["A: down", "B: down"]
        assert await memory_cache.get(_key("query")) is None
        assert len(memory_cache) == 0

        await service.enrich("query")
        assert a.calls == 2

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self, memory_cache: MemoryCacheStore, fake_clock) -> None:
        provider = _CountingProvider("B", value="X")
        service = _service(memory_cache, [provider], ttl=10)

        await service.enrich("query")
        fake_clock.advance(11)
        await service.enrich("query")

        assert provider.calls == 2

    @pytest.mark.asyncio
    async def test_ttl_override(self, memory_cache: MemoryCacheStore, fake_clock) -> None:
        provider = _CountingProvider("B", value="X")
        service = _service(memory_cache, [provider], ttl=3600)

        await service.enrich("query", ttl=5)
        fake_clock.advance(6)
        await service.enrich("query")

        assert provider.calls == 2

    @pytest.mark.asyncio
    async def test_cache_predicate_can_veto(self, memory_cache: MemoryCacheStore) -> None:
        provider = _CountingProvider("fallback", value="X")
        service = _service(
            memory_cache,
            [provider],
            cache_predicate=lambda success: success.provider != "fallback",
        )

        outcome = await service.enrich("query")

        assert isinstance(outcome, Success)
        assert len(memory_cache) == 0

    @pytest.mark.asyncio
    async def test_payload_of_wrong_shape_is_malformed(self, memory_cache: MemoryCacheStore) -> None:
        provider = _CountingProvider("B", payload={"unexpected": True})
        outcome = await _service(memory_cache, [provider]).enrich("query")

        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.ALL_PROVIDERS_FAILED
        assert outcome.causes[0].kind is FailureKind.MALFORMED_RESPONSE
        assert len(memory_cache) == 0

    @pytest.mark.asyncio
    async def test_model_instance_payload_accepted(self, memory_cache: MemoryCacheStore) -> None:
        provider = _CountingProvider("B", payload=_Answer(value="X", provider="B"))
        outcome = await _service(memory_cache, [provider]).enrich("query")
        assert isinstance(outcome, Success)
        assert outcome.payload.value == "X"

    @pytest.mark.asyncio
    async def test_stale_cached_shape_is_recomputed(self, memory_cache: MemoryCacheStore) -> None:
        await memory_cache.set(_key("query"), {"old_field": 1}, ttl=60)
        provider = _CountingProvider("B", value="X")

        outcome = await _service(memory_cache, [provider]).enrich("query")

        assert isinstance(outcome, Success)
        assert outcome.cached is False
        assert provider.calls == 1
        assert await memory_cache.get(_key("query")) == {"value": "X", "provider": "B"}

    @pytest.mark.asyncio
    async def test_unavailable_cache_degrades_to_uncached(self) -> None:
        provider = _CountingProvider("B", value="X")
        service = _service(_BrokenCache(), [provider])

        first = await service.enrich("query")
        second = await service.enrich("query")

        assert isinstance(first, Success)
        assert isinstance(second, Success)
        assert provider.calls == 2

    def test_provider_names_and_key(self, memory_cache: MemoryCacheStore) -> None:
        service = _service(memory_cache, [_CountingProvider("A"), _CountingProvider("B")])
        assert service.provider_names == ["A", "B"]
        assert service.cache_key("query") == _key("query")

    def test_non_positive_ttl_rejected(self, memory_cache: MemoryCacheStore) -> None:
        with pytest.raises(ValueError):
            _service(memory_cache, [], ttl=0)
