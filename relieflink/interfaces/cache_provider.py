"""Abstract base class for TTL cache stores.

Defines the key/value contract the enrichment services memoise through.
Implementations may keep entries in memory or in a durable record store;
the enrichment layer never touches storage directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for TTL key-value cache stores.

    All operations are async to allow for I/O-backed stores without
    blocking the event loop.  Read paths never raise for storage problems:
    an unreadable store behaves like an empty one.
    """

    async def initialize(self) -> None:
        """Prepare backing storage (create tables, directories).  Optional."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve the value stored under *key*.

        Parameters
        ----------
        key:
            The cache key to look up.

        Returns
        -------
        Any or None
            The cached value if present and not expired; ``None`` otherwise.
            An expired entry found here is evicted as a side effect.
        """

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Upsert *value* under *key*, expiring *ttl* seconds from now.

        Any existing entry for *key* is overwritten unconditionally; of two
        concurrent writers, the last write observed by the store wins.

        Parameters
        ----------
        key:
            The cache key.
        value:
            A JSON-serialisable value.
        ttl:
            Time-to-live in seconds; must be positive.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the entry stored under *key* (no-op if absent)."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present in the cache and not expired."""

    @abstractmethod
    async def sweep(self) -> int:
        """Delete every expired entry and return how many were removed.

        Raises
        ------
        relieflink.utils.errors.CacheUnavailableError
            If the backing store cannot be reached.  The sweeper logs it.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this cache backend."""
