"""Wire schemas for the HTTP and WebSocket surface."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    timestamp: datetime
    providers: dict[str, Any]
    topics: int


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None


class TopicCommand(BaseModel):
    """A membership request sent by a WebSocket client.

    ``join``/``leave`` name a topic directly; ``join_disaster`` and
    ``leave_disaster`` name a disaster id and are mapped to its topic.
    """

    action: Literal["join", "leave", "join_disaster", "leave_disaster"]
    topic: str | None = None
    disaster_id: str | int | None = None
