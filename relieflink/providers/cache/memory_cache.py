"""In-memory cache store using cachetools.TLRUCache.

Per-entry TTLs are honoured through TLRUCache's time-to-use callback.  The
store is bounded by ``max_size`` and does not survive a restart; use
SQLiteCacheStore where durability matters.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import structlog
from cachetools import TLRUCache

from relieflink.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


def _time_to_use(_key: str, item: tuple[Any, int], now: float) -> float:
    return now + item[1]


class MemoryCacheStore(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TLRUCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    clock:
        Returns the current aware UTC time.  Injected by tests.
    """

    def __init__(self, max_size: int = 10_000, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._cache: TLRUCache[str, tuple[Any, int]] = TLRUCache(
            maxsize=max_size,
            ttu=_time_to_use,
            timer=lambda: self._clock().timestamp(),
        )

    async def get(self, key: str) -> Any | None:
        item = self._cache.get(key)
        if item is None:
            # Drops the stale entry if that is why the lookup missed.
            self._cache.expire()
            logger.debug("cache_miss", key=key)
            return None
        logger.debug("cache_hit", key=key)
        return item[0]

    async def set(self, key: str, value: Any, ttl: int) -> None:
        if ttl <= 0:
            msg = f"Cache TTL must be positive, got {ttl}"
            raise ValueError(msg)
        self._cache[key] = (value, ttl)
        logger.debug("cache_set", key=key, ttl=ttl)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)

    async def exists(self, key: str) -> bool:
        return key in self._cache

    async def sweep(self) -> int:
        removed = len(self._cache.expire())
        logger.info("cache_swept", removed=removed)
        return removed

    def get_provider_name(self) -> str:
        return "memory_cache"

    def __len__(self) -> int:
        return len(self._cache)
