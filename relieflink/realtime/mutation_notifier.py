"""Glue between committed writes and the topic broadcaster.

Called by the CRUD layer after a write has been persisted.  Notification is
layered on top of the committed change: nothing here raises, so a
notification problem can never fail or roll back the write.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine, Mapping
from typing import Any

import structlog

from relieflink.models.events import MutationEvent, MutationKind
from relieflink.realtime.broadcaster import TopicBroadcaster
from relieflink.realtime.topics import EVENT_NAMES, EntityType, topics_for
from relieflink.utils.logging import get_logger


class MutationNotifier:
    """Derives topics for a mutation and publishes it."""

    def __init__(self, broadcaster: TopicBroadcaster) -> None:
        self._broadcaster = broadcaster
        self._pending: set[asyncio.Task[int]] = set()
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def notify(
        self,
        topic: str,
        kind: MutationKind | str,
        payload: Mapping[str, Any] | None = None,
        event: str = "entity_updated",
    ) -> int:
        """Publish one mutation to *topic*; return the delivery count (0 on error)."""
        try:
            mutation = MutationEvent(
                topic=topic,
                kind=MutationKind(kind),
                event=event,
                payload=dict(payload or {}),
            )
            return await self._broadcaster.publish(topic, mutation)
        except Exception as exc:  # noqa: BLE001 - notification is best-effort
            self._logger.error(
                "mutation_notification_failed",
                topic=topic,
                kind=str(kind),
                error=str(exc),
            )
            return 0

    async def notify_entity(
        self,
        entity_type: EntityType,
        kind: MutationKind | str,
        record: Mapping[str, Any],
    ) -> int:
        """Publish a mutation of *record* to every topic it belongs to."""
        try:
            topics = topics_for(entity_type, record)
        except ValueError as exc:
            self._logger.error(
                "mutation_topic_unroutable",
                entity_type=entity_type.value,
                error=str(exc),
            )
            return 0

        delivered = 0
        for topic in topics:
            delivered += await self.notify(topic, kind, record, event=EVENT_NAMES[entity_type])
        self._logger.info(
            "mutation_notified",
            entity_type=entity_type.value,
            kind=getattr(kind, "value", kind),
            topics=topics,
            delivered=delivered,
        )
        return delivered

    def notify_nowait(
        self,
        topic: str,
        kind: MutationKind | str,
        payload: Mapping[str, Any] | None = None,
        event: str = "entity_updated",
    ) -> asyncio.Task[int]:
        """Fire-and-forget form of :meth:`notify`."""
        return self._schedule(self.notify(topic, kind, payload, event=event))

    def notify_entity_nowait(
        self,
        entity_type: EntityType,
        kind: MutationKind | str,
        record: Mapping[str, Any],
    ) -> asyncio.Task[int]:
        """Fire-and-forget form of :meth:`notify_entity`."""
        return self._schedule(self.notify_entity(entity_type, kind, record))

    def _schedule(self, coro: Coroutine[Any, Any, int]) -> asyncio.Task[int]:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every scheduled notification to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
