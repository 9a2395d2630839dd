"""Shared pytest fixtures for the ReliefLink test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from relieflink.interfaces.llm_provider import ILLMProvider
from relieflink.interfaces.observer import IObserver
from relieflink.providers.cache.memory_cache import MemoryCacheStore
from relieflink.providers.cache.sqlite_cache import SQLiteCacheStore

# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced UTC clock for TTL tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)  # noqa: UP017

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FakeLLM(ILLMProvider):
    """Scripted LLM: returns queued replies (or raises queued exceptions)."""

    def __init__(self, replies: list[Any] | None = None, name: str = "gemini") -> None:
        self.replies = list(replies or [])
        self.calls: list[dict[str, Any]] = []
        self._name = name
        self.available = True

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 1024,
    ) -> str:
        self.calls.append({"system_prompt": system_prompt, "user_prompt": user_prompt})
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    def is_available(self) -> bool:
        return self.available

    def get_provider_name(self) -> str:
        return self._name


class RecordingObserver(IObserver):
    """Observer that records messages, or fails on every send."""

    def __init__(self, observer_id: str, fail_with: Exception | None = None) -> None:
        self._observer_id = observer_id
        self._connected = True
        self.fail_with = fail_with
        self.received: list[dict[str, Any]] = []

    @property
    def observer_id(self) -> str:
        return self._observer_id

    @property
    def connected(self) -> bool:
        return self._connected

    def mark_disconnected(self) -> None:
        self._connected = False

    async def send(self, message: dict[str, Any]) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.received.append(message)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_llm() -> Callable[..., FakeLLM]:
    return FakeLLM


@pytest.fixture
def make_observer() -> Callable[..., RecordingObserver]:
    return RecordingObserver


@pytest.fixture
def memory_cache(fake_clock: FakeClock) -> MemoryCacheStore:
    return MemoryCacheStore(max_size=100, clock=fake_clock)


@pytest_asyncio.fixture
async def sqlite_cache(tmp_path: Path, fake_clock: FakeClock) -> SQLiteCacheStore:
    store = SQLiteCacheStore(db_path=tmp_path / "cache.db", clock=fake_clock)
    await store.initialize()
    return store
