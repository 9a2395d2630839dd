"""Unit tests for SQLiteCacheStore and MemoryCacheStore."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from relieflink.providers.cache.memory_cache import MemoryCacheStore
from relieflink.providers.cache.sqlite_cache import SQLiteCacheStore
from relieflink.utils.errors import CacheUnavailableError


# ======================================================================
# SQLiteCacheStore
# ======================================================================


class TestSQLiteCacheStore:
    @pytest.mark.asyncio
    async def test_get_missing_key_returns_none(self, sqlite_cache: SQLiteCacheStore) -> None:
        assert await sqlite_cache.get("geocode:missing") is None

    @pytest.mark.asyncio
    async def test_round_trip(self, sqlite_cache: SQLiteCacheStore) -> None:
        value = {"lat": 40.72, "lng": -74.01, "formatted_address": "Lower Manhattan"}
        await sqlite_cache.set("geocode:abc", value, ttl=60)
        assert await sqlite_cache.get("geocode:abc") == value

    @pytest.mark.asyncio
    async def test_expired_entry_is_a_miss_and_sweep_removes_row(
        self, sqlite_cache: SQLiteCacheStore, fake_clock
    ) -> None:
        await sqlite_cache.set("k", {"v": 1}, ttl=1)
        fake_clock.advance(2)

        assert await sqlite_cache.count() == 1
        assert await sqlite_cache.sweep() == 1
        assert await sqlite_cache.count() == 0
        assert await sqlite_cache.get("k") is None

    @pytest.mark.asyncio
    async def test_get_evicts_expired_row(self, sqlite_cache: SQLiteCacheStore, fake_clock) -> None:
        await sqlite_cache.set("k", {"v": 1}, ttl=1)
        fake_clock.advance(2)

        assert await sqlite_cache.get("k") is None
        assert await sqlite_cache.get_entry("k") is None

    @pytest.mark.asyncio
    async def test_entry_is_live_until_expiry(self, sqlite_cache: SQLiteCacheStore, fake_clock) -> None:
        await sqlite_cache.set("k", {"v": 1}, ttl=10)
        fake_clock.advance(9)
        assert await sqlite_cache.get("k") == {"v": 1}

    @pytest.mark.asyncio
    async def test_overwrite_leaves_single_entry(self, sqlite_cache: SQLiteCacheStore) -> None:
        await sqlite_cache.set("k", {"v": "old"}, ttl=60)
        await sqlite_cache.set("k", {"v": "new"}, ttl=60)

        assert await sqlite_cache.count() == 1
        assert await sqlite_cache.get("k") == {"v": "new"}

    @pytest.mark.asyncio
    async def test_overwrite_refreshes_expiry(self, sqlite_cache: SQLiteCacheStore, fake_clock) -> None:
        await sqlite_cache.set("k", {"v": 1}, ttl=5)
        fake_clock.advance(4)
        await sqlite_cache.set("k", {"v": 2}, ttl=5)
        fake_clock.advance(4)
        assert await sqlite_cache.get("k") == {"v": 2}

    @pytest.mark.asyncio
    async def test_entry_timestamps(self, sqlite_cache: SQLiteCacheStore, fake_clock) -> None:
        await sqlite_cache.set("k", ["a", "b"], ttl=3600)
        entry = await sqlite_cache.get_entry("k")

        assert entry is not None
        assert entry.value == ["a", "b"]
        assert entry.created_at == fake_clock.now
        assert entry.expires_at == fake_clock.now + timedelta(seconds=3600)
        assert entry.is_expired(fake_clock.now) is False

    @pytest.mark.asyncio
    async def test_sweep_keeps_live_entries(self, sqlite_cache: SQLiteCacheStore, fake_clock) -> None:
        await sqlite_cache.set("short-1", 1, ttl=1)
        await sqlite_cache.set("short-2", 2, ttl=1)
        await sqlite_cache.set("long", 3, ttl=3600)
        fake_clock.advance(2)

        assert await sqlite_cache.sweep() == 2
        assert await sqlite_cache.get("long") == 3

    @pytest.mark.asyncio
    async def test_delete_and_exists(self, sqlite_cache: SQLiteCacheStore) -> None:
        await sqlite_cache.set("k", "v", ttl=60)
        assert await sqlite_cache.exists("k") is True

        await sqlite_cache.delete("k")
        assert await sqlite_cache.exists("k") is False
        await sqlite_cache.delete("k")  # no-op

    @pytest.mark.asyncio
    async def test_non_positive_ttl_rejected(self, sqlite_cache: SQLiteCacheStore) -> None:
        with pytest.raises(ValueError):
            await sqlite_cache.set("k", "v", ttl=0)

    @pytest.mark.asyncio
    async def test_unreadable_store_behaves_as_miss(self, tmp_path: Path) -> None:
        # A directory cannot be opened as a database file.
        store = SQLiteCacheStore(db_path=tmp_path)

        await store.set("k", "v", ttl=60)  # logged, not raised
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_sweep_failure_raises_cache_unavailable(self, tmp_path: Path) -> None:
        store = SQLiteCacheStore(db_path=tmp_path)
        with pytest.raises(CacheUnavailableError):
            await store.sweep()

    def test_provider_name(self, tmp_path: Path) -> None:
        assert SQLiteCacheStore(db_path=tmp_path / "c.db").get_provider_name() == "sqlite_cache"


# ======================================================================
# MemoryCacheStore
# ======================================================================


class TestMemoryCacheStore:
    @pytest.mark.asyncio
    async def test_get_missing_key_returns_none(self, memory_cache: MemoryCacheStore) -> None:
        assert await memory_cache.get("nonexistent") is None

    @pytest.mark.asyncio
    async def test_round_trip(self, memory_cache: MemoryCacheStore) -> None:
        await memory_cache.set("k", {"score": 80}, ttl=60)
        assert await memory_cache.get("k") == {"score": 80}

    @pytest.mark.asyncio
    async def test_expired_entry_is_a_miss(self, memory_cache: MemoryCacheStore, fake_clock) -> None:
        await memory_cache.set("k", "v", ttl=1)
        fake_clock.advance(2)

        assert await memory_cache.get("k") is None
        assert await memory_cache.exists("k") is False
        assert len(memory_cache) == 0

    @pytest.mark.asyncio
    async def test_per_entry_ttl(self, memory_cache: MemoryCacheStore, fake_clock) -> None:
        await memory_cache.set("short", "s", ttl=5)
        await memory_cache.set("long", "l", ttl=50)
        fake_clock.advance(10)

        assert await memory_cache.get("short") is None
        assert await memory_cache.get("long") == "l"

    @pytest.mark.asyncio
    async def test_sweep_counts_expired(self, memory_cache: MemoryCacheStore, fake_clock) -> None:
        await memory_cache.set("a", 1, ttl=1)
        await memory_cache.set("b", 2, ttl=1)
        await memory_cache.set("c", 3, ttl=100)
        fake_clock.advance(2)

        assert await memory_cache.sweep() == 2
        assert len(memory_cache) == 1

    @pytest.mark.asyncio
    async def test_overwrite(self, memory_cache: MemoryCacheStore) -> None:
        await memory_cache.set("k", "old", ttl=60)
        await memory_cache.set("k", "new", ttl=60)

        assert await memory_cache.get("k") == "new"
        assert len(memory_cache) == 1

    @pytest.mark.asyncio
    async def test_bounded_size_evicts_least_recently_used(self, fake_clock) -> None:
        cache = MemoryCacheStore(max_size=2, clock=fake_clock)
        await cache.set("a", 1, ttl=60)
        await cache.set("b", 2, ttl=60)
        await cache.get("a")
        await cache.set("c", 3, ttl=60)

        assert await cache.get("b") is None
        assert await cache.get("a") == 1
        assert await cache.get("c") == 3

    @pytest.mark.asyncio
    async def test_delete_nonexistent_is_noop(self, memory_cache: MemoryCacheStore) -> None:
        await memory_cache.delete("nonexistent")

    @pytest.mark.asyncio
    async def test_non_positive_ttl_rejected(self, memory_cache: MemoryCacheStore) -> None:
        with pytest.raises(ValueError):
            await memory_cache.set("k", "v", ttl=-1)
