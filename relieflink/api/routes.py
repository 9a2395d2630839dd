"""HTTP routes owned by the core.

Record CRUD lives in the consuming service; the only route here is the
health check, which reports which providers each fallback chain will try.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request

from relieflink import __version__
from relieflink.api.schemas import HealthResponse

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider chains."""
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    topics = 0
    if hasattr(request.app.state, "broadcaster"):
        topics = request.app.state.broadcaster.topic_count

    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(tz=timezone.utc),  # noqa: UP017
        providers=providers,
        topics=topics,
    )
