"""WebSocket transport for topic-scoped mutation events.

Each connection becomes one :class:`WebSocketObserver`.  The client
manages its own topic memberships by sending JSON commands::

    {"action": "join", "topic": "disaster:42"}
    {"action": "leave", "topic": "disaster:42"}
    {"action": "join_disaster", "disaster_id": 42}

Every command is acknowledged with ``{"type": "joined"|"left", "topic": ...}``
or ``{"type": "error", "detail": ...}``.  Mutation events arrive as the JSON
form of :class:`~relieflink.models.events.MutationEvent`.  On disconnect
the observer is marked terminal and removed from every topic.
"""

from __future__ import annotations

import json
import uuid
from typing import Any

import structlog
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from relieflink.api.schemas import TopicCommand
from relieflink.interfaces.observer import IObserver
from relieflink.realtime.broadcaster import TopicBroadcaster
from relieflink.realtime.topics import disaster_topic, is_valid_topic
from relieflink.utils.errors import BroadcastDeliveryError
from relieflink.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


class WebSocketObserver(IObserver):
    """Observer handle wrapping one accepted WebSocket."""

    def __init__(self, websocket: WebSocket, observer_id: str | None = None) -> None:
        self._websocket = websocket
        self._observer_id = observer_id or uuid.uuid4().hex[:12]
        self._connected = True

    @property
    def observer_id(self) -> str:
        return self._observer_id

    @property
    def connected(self) -> bool:
        return self._connected

    def mark_disconnected(self) -> None:
        self._connected = False

    async def send(self, message: dict[str, Any]) -> None:
        if not self._connected:
            raise BroadcastDeliveryError(f"observer {self._observer_id} is disconnected")
        await self._websocket.send_json(message)


def handle_command(
    broadcaster: TopicBroadcaster,
    observer: IObserver,
    raw: Any,
) -> dict[str, Any]:
    """Apply one client command and return the acknowledgement to send back."""
    try:
        command = TopicCommand.model_validate(raw)
    except ValidationError:
        return {"type": "error", "detail": "expected {'action': ..., 'topic': ...}"}

    try:
        if command.action in ("join_disaster", "leave_disaster"):
            if command.disaster_id is None:
                return {"type": "error", "detail": "disaster_id is required"}
            topic = disaster_topic(command.disaster_id)
        else:
            topic = command.topic or ""
    except ValueError as exc:
        return {"type": "error", "detail": str(exc)}

    if not is_valid_topic(topic):
        return {"type": "error", "detail": f"unknown topic '{topic}'"}

    if command.action.startswith("join"):
        broadcaster.join(topic, observer)
        return {"type": "joined", "topic": topic}

    broadcaster.leave(topic, observer)
    return {"type": "left", "topic": topic}


async def websocket_events(websocket: WebSocket) -> None:
    """Serve one WebSocket client until it disconnects.

    Parameters
    ----------
    websocket:
        The WebSocket connection managed by FastAPI / Starlette.
    """
    broadcaster: TopicBroadcaster = websocket.app.state.broadcaster

    await websocket.accept()
    observer = WebSocketObserver(websocket)
    _logger.info("websocket_connected", observer=observer.observer_id)

    try:
        while True:
            text = await websocket.receive_text()
            try:
                raw = json.loads(text)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "detail": "invalid JSON"})
                continue
            await websocket.send_json(handle_command(broadcaster, observer, raw))

    except WebSocketDisconnect:
        _logger.info("websocket_disconnected", observer=observer.observer_id)

    finally:
        broadcaster.disconnect(observer)
