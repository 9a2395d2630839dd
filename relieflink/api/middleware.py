"""API middleware: CORS, request logging, and error handling.

Provides helpers to configure cross-origin resource sharing, structured
request logging (via structlog), and conversion of ``ReliefLinkError``
subclasses raised by routes into JSON ``ErrorResponse`` bodies.

# ─── MIDDLEWARE EXECUTION ORDER ─────────────────────────────────────────
#
# Starlette middleware is a stack (last added, first executed):
#
#   In main.py:
#     app.add_middleware(ErrorHandlingMiddleware)   # added 1st, inner
#     app.add_middleware(RequestLoggingMiddleware)  # added 2nd, outer
#
#   Request flow:
#     Client → RequestLogging → ErrorHandling → route handler
#   Response flow:
#     Client ← RequestLogging ← ErrorHandling ← route handler
#
# So RequestLoggingMiddleware logs the final status code, including the
# 502 that ErrorHandling substitutes for a failed enrichment.
#
# WebSocket traffic on /ws bypasses BaseHTTPMiddleware entirely.
# ────────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from relieflink.api.schemas import ErrorResponse
from relieflink.utils.errors import ReliefLinkError
from relieflink.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    allowed_origins:
        Explicit list of allowed origins.  Defaults to ``["*"]`` for
        development; the field dashboard's origin belongs here in production.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,  # Allow cookies/auth headers
        allow_methods=["*"],     # GET, POST, etc.
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn ``ReliefLinkError`` subclasses into sanitized JSON errors.

    Record routes mounted by the consuming service call
    ``Outcome.unwrap()``; an exhausted fallback chain then surfaces here as
    ``AllProvidersFailedError`` and becomes a 502, since the failure lies
    with upstream providers rather than the request.  Details go to the
    server log; the client only sees the error type and message.  Other
    exceptions fall through to FastAPI's default 500 handler.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except ReliefLinkError as exc:
            # Full detail server-side only
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
            )
            body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
            return JSONResponse(status_code=502, content=body.model_dump())
