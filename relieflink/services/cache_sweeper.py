"""Periodic removal of expired cache entries.

Runs as an explicit ``asyncio.Task`` owned by :class:`CacheSweeper`, started
from the application lifespan and stopped on shutdown, so no timer outlives
the process's event loop.  Sweep failures are logged and the loop carries
on; they never reach request handling.
"""

from __future__ import annotations

import asyncio
import contextlib

import structlog

from relieflink.interfaces.cache_provider import ICacheProvider
from relieflink.utils.logging import get_logger


class CacheSweeper:
    """Background task calling :meth:`ICacheProvider.sweep` every *interval* seconds."""

    def __init__(self, cache: ICacheProvider, interval: float = 3600.0) -> None:
        if interval <= 0:
            msg = f"Sweep interval must be positive, got {interval}"
            raise ValueError(msg)
        self._cache = cache
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep loop (idempotent)."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="cache-sweeper")
        self._logger.info("cache_sweeper_started", interval=self._interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self._logger.info("cache_sweeper_stopped")

    async def run_once(self) -> int:
        """Sweep now.  Returns the number of entries removed (0 on failure)."""
        try:
            return await self._cache.sweep()
        except Exception as exc:  # noqa: BLE001 - sweeping is best-effort
            self._logger.warning(
                "cache_sweep_failed",
                cache=self._cache.get_provider_name(),
                error=str(exc),
            )
            return 0

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.run_once()
