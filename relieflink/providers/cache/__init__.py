"""Cache store backends.

SQLiteCacheStore persists entries so a restart does not throw away paid-for
geocoding and analysis results.  MemoryCacheStore is a bounded in-process
store for development and tests.  Both implement ICacheProvider.
"""

from relieflink.providers.cache.memory_cache import MemoryCacheStore
from relieflink.providers.cache.sqlite_cache import SQLiteCacheStore

__all__ = ["MemoryCacheStore", "SQLiteCacheStore"]
