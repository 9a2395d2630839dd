"""Mutation events pushed to real-time observers."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class MutationEvent(BaseModel):
    """A committed change to a tracked entity.

    Ephemeral: never stored, delivered best-effort to whoever is subscribed
    to ``topic`` at publish time.
    """

    model_config = ConfigDict(frozen=True)

    topic: str
    kind: MutationKind
    event: str = "entity_updated"
    payload: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )

    def to_message(self) -> dict[str, Any]:
        """Return the JSON-ready wire form sent to observers."""
        return self.model_dump(mode="json")
