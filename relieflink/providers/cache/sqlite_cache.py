"""SQLite-backed TTL cache store.

Persists enrichment results to ``data/cache.db`` using ``aiosqlite``.  One
row per key; timestamps are fixed-width UTC ISO-8601 strings so that the
lexical comparisons in SQL agree with chronological order.

Concurrency notes:
    - ``set`` is a single ``INSERT ... ON CONFLICT DO UPDATE`` statement, so
      concurrent writers to one key never leave a half-written row.
    - Lazy eviction and sweeping delete a key only while it is still
      expired, so a fresh ``set`` racing the delete survives.
    - ``sweep`` deletes one key per transaction and never holds the write
      lock for longer than a single row.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from relieflink.interfaces.cache_provider import ICacheProvider
from relieflink.models.cache import CacheEntry
from relieflink.utils.errors import CacheUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/cache.db")
_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS cache (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    expires_at  TEXT NOT NULL,
    created_at  TEXT NOT NULL
);
"""

_CREATE_INDEX_SQL = "CREATE INDEX IF NOT EXISTS idx_cache_expires ON cache(expires_at);"

_UPSERT_SQL = """\
INSERT INTO cache (key, value, expires_at, created_at)
VALUES (?, ?, ?, ?)
ON CONFLICT(key)
DO UPDATE SET value      = excluded.value,
              expires_at = excluded.expires_at,
              created_at = excluded.created_at;
"""

_SELECT_SQL = "SELECT key, value, expires_at, created_at FROM cache WHERE key = ?;"

_DELETE_SQL = "DELETE FROM cache WHERE key = ?;"

_DELETE_IF_EXPIRED_SQL = "DELETE FROM cache WHERE key = ? AND expires_at <= ?;"

_SELECT_EXPIRED_KEYS_SQL = "SELECT key FROM cache WHERE expires_at <= ?;"

_COUNT_SQL = "SELECT COUNT(*) FROM cache;"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


def _format_ts(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)  # noqa: UP017


def _parse_ts(raw: str) -> datetime:
    return datetime.strptime(raw, _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)  # noqa: UP017


class SQLiteCacheStore(ICacheProvider):
    """Durable TTL cache backed by a single SQLite table.

    Parameters
    ----------
    db_path:
        Location of the SQLite file; parent directories are created.
    clock:
        Returns the current aware UTC time.  Injected by tests.
    busy_timeout:
        Seconds a connection waits on a locked database before failing.
    """

    def __init__(
        self,
        db_path: str | Path = _DEFAULT_DB_PATH,
        clock: Callable[[], datetime] = _utcnow,
        busy_timeout: float = 5.0,
    ) -> None:
        self._db_path = Path(db_path)
        self._clock = clock
        self._busy_timeout = busy_timeout

    def _connect(self) -> aiosqlite.Connection:
        return aiosqlite.connect(str(self._db_path), timeout=self._busy_timeout)

    async def initialize(self) -> None:
        """Create the cache table and expiry index if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with self._connect() as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.execute(_CREATE_TABLE_SQL)
            await db.execute(_CREATE_INDEX_SQL)
            await db.commit()
        logger.info("cache_db_initialized", path=str(self._db_path))

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Return the live value for *key*, evicting it if it has expired.

        Storage errors are logged and reported as a miss.
        """
        now = _format_ts(self._clock())
        try:
            async with self._connect() as db:
                cursor = await db.execute(_SELECT_SQL, (key,))
                row = await cursor.fetchone()
                if row is None:
                    logger.debug("cache_miss", key=key)
                    return None

                _, raw_value, expires_at, _ = row
                if expires_at <= now:
                    await db.execute(_DELETE_IF_EXPIRED_SQL, (key, now))
                    await db.commit()
                    logger.debug("cache_expired", key=key, expires_at=expires_at)
                    return None
        except (aiosqlite.Error, OSError) as exc:
            logger.warning("cache_unavailable", operation="get", key=key, error=str(exc))
            return None

        try:
            value = json.loads(raw_value)
        except ValueError as exc:
            logger.warning("cache_entry_corrupt", key=key, error=str(exc))
            await self.delete(key)
            return None

        logger.debug("cache_hit", key=key)
        return value

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Upsert *value* under *key*.  Storage errors are logged, not raised."""
        if ttl <= 0:
            msg = f"Cache TTL must be positive, got {ttl}"
            raise ValueError(msg)

        payload = json.dumps(value, ensure_ascii=False)
        now = self._clock()
        expires_at = now + timedelta(seconds=ttl)
        try:
            async with self._connect() as db:
                await db.execute(
                    _UPSERT_SQL,
                    (key, payload, _format_ts(expires_at), _format_ts(now)),
                )
                await db.commit()
        except (aiosqlite.Error, OSError) as exc:
            logger.warning("cache_unavailable", operation="set", key=key, error=str(exc))
            return
        logger.debug("cache_set", key=key, ttl=ttl)

    async def delete(self, key: str) -> None:
        """Remove *key* from the cache (no-op if absent)."""
        try:
            async with self._connect() as db:
                await db.execute(_DELETE_SQL, (key,))
                await db.commit()
        except (aiosqlite.Error, OSError) as exc:
            logger.warning("cache_unavailable", operation="delete", key=key, error=str(exc))
            return
        logger.debug("cache_delete", key=key)

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def sweep(self) -> int:
        """Delete expired rows one at a time; return the number removed."""
        cutoff = _format_ts(self._clock())
        removed = 0
        try:
            async with self._connect() as db:
                cursor = await db.execute(_SELECT_EXPIRED_KEYS_SQL, (cutoff,))
                keys = [row[0] for row in await cursor.fetchall()]
                for key in keys:
                    cursor = await db.execute(_DELETE_IF_EXPIRED_SQL, (key, cutoff))
                    await db.commit()
                    removed += max(cursor.rowcount, 0)
        except (aiosqlite.Error, OSError) as exc:
            raise CacheUnavailableError(
                message=f"Cache sweep failed after {removed} deletions: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("cache_swept", removed=removed)
        return removed

    def get_provider_name(self) -> str:
        return "sqlite_cache"

    # ------------------------------------------------------------------
    # Inspection helpers
    # ------------------------------------------------------------------

    async def get_entry(self, key: str) -> CacheEntry | None:
        """Return the raw row for *key*, expired or not (no eviction)."""
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_SQL, (key,))
            row = await cursor.fetchone()
        if row is None:
            return None
        stored_key, raw_value, expires_at, created_at = row
        return CacheEntry(
            key=stored_key,
            value=json.loads(raw_value),
            expires_at=_parse_ts(expires_at),
            created_at=_parse_ts(created_at),
        )

    async def count(self) -> int:
        """Return the number of physically stored rows."""
        async with self._connect() as db:
            cursor = await db.execute(_COUNT_SQL)
            row = await cursor.fetchone()
        return int(row[0]) if row else 0
