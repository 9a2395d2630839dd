"""ReliefLink FastAPI application entry point.

Wires the enrichment and distribution core together via dependency
injection: one ``Settings`` value is read at startup and every cache store,
provider, fallback chain and broadcaster is built from it and placed on
``app.state``.  The CRUD layer that consumes the core reads
``location_service``, ``content_analysis_service`` and ``notifier`` from
there.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, WebSocket

from relieflink import __version__
from relieflink.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from relieflink.api.routes import router as api_router
from relieflink.api.websocket import websocket_events
from relieflink.config.settings import EnrichmentKind, Settings
from relieflink.interfaces.analysis_provider import IContentAnalysisProvider
from relieflink.interfaces.cache_provider import ICacheProvider
from relieflink.interfaces.extraction_provider import ILocationExtractionProvider
from relieflink.interfaces.geocoding_provider import IGeocodingProvider
from relieflink.interfaces.llm_provider import ILLMProvider
from relieflink.providers.analysis.llm_analysis_provider import LLMAnalysisProvider
from relieflink.providers.cache.memory_cache import MemoryCacheStore
from relieflink.providers.cache.sqlite_cache import SQLiteCacheStore
from relieflink.providers.extraction.llm_location_extractor import LLMLocationExtractor
from relieflink.providers.geocoding.google_maps_provider import GoogleMapsGeocodingProvider
from relieflink.providers.geocoding.mapbox_provider import MapboxGeocodingProvider
from relieflink.providers.geocoding.nominatim_provider import NominatimGeocodingProvider
from relieflink.providers.llm.anthropic_provider import AnthropicLLMProvider
from relieflink.providers.llm.gemini_provider import GeminiLLMProvider
from relieflink.realtime.broadcaster import TopicBroadcaster
from relieflink.realtime.mutation_notifier import MutationNotifier
from relieflink.services.cache_sweeper import CacheSweeper
from relieflink.services.content_analysis_service import ContentAnalysisService
from relieflink.services.location_service import LocationService
from relieflink.utils.errors import ConfigurationError
from relieflink.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component builders
# ---------------------------------------------------------------------------


def _build_cache_store(app_settings: Settings) -> ICacheProvider:
    backend = app_settings.cache_backend.lower()
    if backend == "sqlite":
        return SQLiteCacheStore(db_path=app_settings.cache_db_path)
    if backend == "memory":
        return MemoryCacheStore(max_size=app_settings.cache_memory_max_size)
    raise ConfigurationError(f"Unknown cache backend '{app_settings.cache_backend}'")


def _build_llm_provider(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
) -> ILLMProvider | None:
    """Select the first available LLM provider based on configured API keys.

    Priority order: Gemini -> Anthropic.  Returns ``None`` when neither is
    configured, leaving the pattern and heuristic fallbacks as the only
    extraction and analysis stages.
    """
    if app_settings.gemini_api_key:
        return GeminiLLMProvider(settings=app_settings, http_client=http_client)
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings)
    return None


def _build_geocoders(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
) -> list[IGeocodingProvider]:
    """Build the geocoding chain in ``geocoding_provider_order``.

    Providers without credentials stay in the chain; they report
    themselves unavailable at call time and the resolver moves on.
    """
    factories = {
        "google_maps": GoogleMapsGeocodingProvider,
        "mapbox": MapboxGeocodingProvider,
        "openstreetmap": NominatimGeocodingProvider,
    }
    geocoders: list[IGeocodingProvider] = []
    for name in app_settings.geocoding_provider_order:
        factory = factories.get(name)
        if factory is None:
            raise ConfigurationError(f"Unknown geocoding provider '{name}'")
        geocoders.append(factory(settings=app_settings, http_client=http_client))
    return geocoders


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=30.0)
    cache = _build_cache_store(app_settings)

    # -- Providers --
    llm = _build_llm_provider(app_settings, http_client)
    geocoders = _build_geocoders(app_settings, http_client)

    extractors: list[ILocationExtractionProvider] = []
    analysers: list[IContentAnalysisProvider] = []
    if llm is not None:
        extractors.append(LLMLocationExtractor(llm, timeout=app_settings.llm_timeout_seconds))
        analysers.append(LLMAnalysisProvider(llm, timeout=app_settings.llm_timeout_seconds))

    # -- Services --
    location_service = LocationService(
        cache=cache,
        geocoders=geocoders,
        extractors=extractors,
        geocode_ttl=app_settings.ttl_for(EnrichmentKind.GEOCODE),
        extraction_ttl=app_settings.ttl_for(EnrichmentKind.LOCATION_EXTRACTION),
        provider_timeout=app_settings.provider_timeout_seconds,
    )
    content_analysis_service = ContentAnalysisService(
        cache=cache,
        providers=analysers,
        ttl=app_settings.ttl_for(EnrichmentKind.CONTENT_ANALYSIS),
        provider_timeout=app_settings.llm_timeout_seconds,
    )
    sweeper = CacheSweeper(cache, interval=app_settings.cache_sweep_interval_seconds)

    # -- Real-time --
    broadcaster = TopicBroadcaster(send_timeout=app_settings.broadcast_send_timeout_seconds)
    notifier = MutationNotifier(broadcaster)

    # -- Provider registry for /health --
    provider_registry: dict[str, Any] = {
        "cache": cache.get_provider_name(),
        "llm": llm.get_provider_name() if llm is not None else None,
        "geocoding": location_service.get_geocoding_providers(),
        "geocoding_available": app_settings.get_available_geocoding_providers(),
        "content_analysis": content_analysis_service.get_providers(),
    }

    return {
        "settings": app_settings,
        "http_client": http_client,
        "cache": cache,
        "location_service": location_service,
        "content_analysis_service": content_analysis_service,
        "sweeper": sweeper,
        "broadcaster": broadcaster,
        "notifier": notifier,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise the core on startup; stop the sweeper and close clients on shutdown."""
    app_settings: Settings = getattr(application.state, "app_settings", settings)
    components = _build_all(app_settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["cache"].initialize()
    components["sweeper"].start()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=app_settings.app_env,
        cache=components["provider_registry"]["cache"],
        geocoding=components["provider_registry"]["geocoding"],
        content_analysis=components["provider_registry"]["content_analysis"],
    )

    yield

    # -- Shutdown --
    await components["notifier"].drain()
    await components["sweeper"].stop()
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="Sweeper stopped, HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="ReliefLink Core",
        version=__version__,
        description=(
            "Cached, provider-fallback enrichment (geocoding, location "
            "extraction, report authenticity) and topic-scoped real-time "
            "distribution of disaster-response record changes."
        ),
        lifespan=_lifespan,
    )
    application.state.app_settings = app_settings or settings

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- Routes --
    application.include_router(api_router)

    # -- WebSocket --
    @application.websocket("/ws")
    async def ws_events(websocket: WebSocket) -> None:
        await websocket_events(websocket)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "relieflink.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
