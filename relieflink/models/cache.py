"""Cache entry model, mirroring one row of the ``cache`` table."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    value: Any
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
