"""Unit tests for the /ws transport: command handling and the observer handle."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from relieflink.api.websocket import WebSocketObserver, handle_command
from relieflink.realtime.broadcaster import TopicBroadcaster
from relieflink.utils.errors import BroadcastDeliveryError


# ======================================================================
# handle_command
# ======================================================================


class TestHandleCommand:
    @pytest.fixture()
    def broadcaster(self) -> TopicBroadcaster:
        return TopicBroadcaster()

    def test_join_topic(self, broadcaster, make_observer) -> None:
        observer = make_observer("o1")
        reply = handle_command(broadcaster, observer, {"action": "join", "topic": "disasters"})

        assert reply == {"type": "joined", "topic": "disasters"}
        assert observer in broadcaster.subscribers("disasters")

    def test_join_disaster_by_id(self, broadcaster, make_observer) -> None:
        observer = make_observer("o1")
        reply = handle_command(broadcaster, observer, {"action": "join_disaster", "disaster_id": 42})

        assert reply == {"type": "joined", "topic": "disaster:42"}

    def test_leave(self, broadcaster, make_observer) -> None:
        observer = make_observer("o1")
        broadcaster.join("disaster:42", observer)

        reply = handle_command(broadcaster, observer, {"action": "leave_disaster", "disaster_id": 42})

        assert reply == {"type": "left", "topic": "disaster:42"}
        assert broadcaster.topics_for(observer) == frozenset()

    def test_missing_disaster_id(self, broadcaster, make_observer) -> None:
        reply = handle_command(broadcaster, make_observer("o1"), {"action": "join_disaster"})
        assert reply["type"] == "error"

    def test_unknown_topic(self, broadcaster, make_observer) -> None:
        reply = handle_command(broadcaster, make_observer("o1"), {"action": "join", "topic": "admin"})
        assert reply == {"type": "error", "detail": "unknown topic 'admin'"}
        assert broadcaster.topic_count == 0

    def test_unknown_action(self, broadcaster, make_observer) -> None:
        reply = handle_command(broadcaster, make_observer("o1"), {"action": "subscribe_all"})
        assert reply["type"] == "error"

    def test_non_object_payload(self, broadcaster, make_observer) -> None:
        assert handle_command(broadcaster, make_observer("o1"), ["join"])["type"] == "error"


# ======================================================================
# WebSocketObserver
# ======================================================================


class TestWebSocketObserver:
    @pytest.mark.asyncio
    async def test_send_forwards_json(self) -> None:
        websocket = MagicMock()
        websocket.send_json = AsyncMock()
        observer = WebSocketObserver(websocket, observer_id="client-1")

        await observer.send({"event": "disaster_updated"})

        websocket.send_json.assert_awaited_once_with({"event": "disaster_updated"})
        assert observer.observer_id == "client-1"

    @pytest.mark.asyncio
    async def test_send_after_disconnect_raises(self) -> None:
        websocket = MagicMock()
        websocket.send_json = AsyncMock()
        observer = WebSocketObserver(websocket)

        observer.mark_disconnected()

        assert observer.connected is False
        with pytest.raises(BroadcastDeliveryError):
            await observer.send({"event": "disaster_updated"})
        websocket.send_json.assert_not_awaited()

    def test_generated_ids_are_unique(self) -> None:
        assert WebSocketObserver(MagicMock()).observer_id != WebSocketObserver(MagicMock()).observer_id
