"""Publish/subscribe fan-out keyed by topic.

Observers explicitly join topics and only ever receive events published to
a topic they are in.  Delivery is best-effort to whoever is subscribed at
the moment of publish; there is no replay or history.

Membership changes (join/leave) are synchronous and never await, so on the
event loop they are atomic with respect to ``publish``, which takes an
immutable snapshot of the subscriber set before the first await.

Each observer is delivered to concurrently and under its own timeout.  A
failing or slow observer is logged and skipped; it never delays or fails
delivery to the others, and never surfaces to the publisher.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from relieflink.interfaces.observer import IObserver
from relieflink.models.events import MutationEvent
from relieflink.utils.logging import get_logger


class TopicBroadcaster:
    """Topic membership registry and fan-out.

    Parameters
    ----------
    send_timeout:
        Seconds allowed for delivering one message to one observer.
    """

    def __init__(self, send_timeout: float = 5.0) -> None:
        self._send_timeout = send_timeout
        # topic -> observers, and the reverse index for leave-all
        self._subscribers: dict[str, set[IObserver]] = {}
        self._memberships: dict[IObserver, set[str]] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def join(self, topic: str, observer: IObserver) -> bool:
        """Subscribe *observer* to *topic*.  Returns ``False`` if nothing changed."""
        if not observer.connected:
            self._logger.warning(
                "join_after_disconnect_ignored",
                topic=topic,
                observer=observer.observer_id,
            )
            return False

        members = self._subscribers.setdefault(topic, set())
        if observer in members:
            return False
        members.add(observer)
        self._memberships.setdefault(observer, set()).add(topic)
        self._logger.debug(
            "observer_joined",
            topic=topic,
            observer=observer.observer_id,
            total_subscribers=len(members),
        )
        return True

    def leave(self, topic: str, observer: IObserver) -> bool:
        """Unsubscribe *observer* from *topic*.  Returns ``False`` if it was not in it."""
        members = self._subscribers.get(topic)
        if not members or observer not in members:
            return False
        members.discard(observer)
        if not members:
            del self._subscribers[topic]

        topics = self._memberships.get(observer)
        if topics is not None:
            topics.discard(topic)
            if not topics:
                del self._memberships[observer]

        self._logger.debug(
            "observer_left",
            topic=topic,
            observer=observer.observer_id,
            remaining_subscribers=len(members),
        )
        return True

    def leave_all(self, observer: IObserver) -> list[str]:
        """Remove *observer* from every topic; return the topics it left."""
        topics = sorted(self._memberships.get(observer, ()))
        for topic in topics:
            self.leave(topic, observer)
        return topics

    def disconnect(self, observer: IObserver) -> None:
        """Move *observer* to its terminal state and drop all its memberships."""
        observer.mark_disconnected()
        left = self.leave_all(observer)
        self._logger.info("observer_disconnected", observer=observer.observer_id, topics=left)

    def subscribers(self, topic: str) -> frozenset[IObserver]:
        return frozenset(self._subscribers.get(topic, ()))

    def topics_for(self, observer: IObserver) -> frozenset[str]:
        return frozenset(self._memberships.get(observer, ()))

    @property
    def topic_count(self) -> int:
        return len(self._subscribers)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def publish(self, topic: str, event: MutationEvent | dict[str, Any]) -> int:
        """Deliver *event* to the current subscribers of *topic*.

        Returns the number of observers that received it.
        """
        snapshot = tuple(self._subscribers.get(topic, ()))
        if not snapshot:
            self._logger.debug("publish_no_subscribers", topic=topic)
            return 0

        message = event.to_message() if isinstance(event, MutationEvent) else dict(event)
        results = await asyncio.gather(
            *(self._deliver(topic, observer, message) for observer in snapshot)
        )
        delivered = sum(results)
        self._logger.debug(
            "published",
            topic=topic,
            event_name=message.get("event"),
            delivered=delivered,
            failed=len(snapshot) - delivered,
        )
        return delivered

    async def _deliver(self, topic: str, observer: IObserver, message: dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(observer.send(message), timeout=self._send_timeout)
        except asyncio.TimeoutError:
            self._logger.warning(
                "broadcast_delivery_timeout",
                topic=topic,
                observer=observer.observer_id,
                timeout=self._send_timeout,
            )
            return False
        except Exception as exc:  # noqa: BLE001 - one observer must not affect the rest
            self._logger.warning(
                "broadcast_delivery_failed",
                topic=topic,
                observer=observer.observer_id,
                error=str(exc),
            )
            return False
        return True
