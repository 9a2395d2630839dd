"""Abstract base class for real-time observer handles."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IObserver(ABC):
    """One connected client of the real-time transport.

    Lifecycle: ``connected`` -> ``disconnected`` (terminal).  Handles are
    hashed by identity, so the same handle joining twice is one subscriber.
    """

    @property
    @abstractmethod
    def observer_id(self) -> str:
        """Stable identifier used in log records."""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """``False`` once :meth:`mark_disconnected` has been called."""

    @abstractmethod
    def mark_disconnected(self) -> None:
        """Move the handle to its terminal state."""

    @abstractmethod
    async def send(self, message: dict[str, Any]) -> None:
        """Deliver one JSON message.

        Raises
        ------
        relieflink.utils.errors.BroadcastDeliveryError
            Or any transport error; the broadcaster isolates it.
        """
