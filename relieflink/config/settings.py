"""Application settings loaded from environment variables via pydantic-settings.

Values come from (highest priority first) environment variables, then a
``.env`` file in the working directory, then the defaults below.  Field
``google_maps_api_key`` maps to env var ``GOOGLE_MAPS_API_KEY`` and so on.

One ``Settings`` instance is built at process start and passed to every
component that needs configuration; nothing below ``main.py`` reads the
environment itself.
"""

import json
from enum import Enum
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class EnrichmentKind(str, Enum):
    """Enrichment kinds with their own cache namespace and TTL."""

    GEOCODE = "geocode"
    LOCATION_EXTRACTION = "location_extraction"
    CONTENT_ANALYSIS = "content_analysis"
    RESOURCES = "resources"
    SOCIAL_MEDIA = "social_media"
    OFFICIAL_UPDATES = "official_updates"


class Settings(BaseSettings):
    """ReliefLink application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Geocoding providers ===
    # Empty string = "not configured"; the provider fails fast and the
    # fallback chain moves on to the next entry.
    google_maps_api_key: str = ""
    mapbox_access_token: str = ""
    nominatim_user_agent: str = "DisasterResponsePlatform/1.0"
    # Env form: GEOCODING_PROVIDER_ORDER=mapbox,openstreetmap (a JSON array also works)
    geocoding_provider_order: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["google_maps", "mapbox", "openstreetmap"]
    )
    provider_timeout_seconds: float = 10.0

    # === Generative analysis ===
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    llm_timeout_seconds: float = 30.0

    # === Cache ===
    cache_backend: str = "sqlite"  # "sqlite" or "memory"
    cache_db_path: str = "data/cache.db"
    cache_memory_max_size: int = 10_000
    cache_sweep_interval_seconds: float = 3600.0

    # Per-kind TTLs (seconds)
    ttl_geocode_seconds: int = 3600
    ttl_location_extraction_seconds: int = 3600
    ttl_content_analysis_seconds: int = 3600
    ttl_resources_seconds: int = 600
    ttl_social_media_seconds: int = 300
    ttl_official_updates_seconds: int = 1800

    # === Real-time ===
    broadcast_send_timeout_seconds: float = 5.0

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @field_validator("geocoding_provider_order", mode="before")
    @classmethod
    def _split_provider_order(cls, value: Any) -> Any:
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("["):
                return json.loads(text)
            return [name.strip() for name in text.split(",") if name.strip()]
        return value

    def get_available_geocoding_providers(self) -> list[str]:
        """Return the configured geocoding order, minus providers lacking credentials."""
        credentials = {
            "google_maps": self.google_maps_api_key,
            "mapbox": self.mapbox_access_token,
            "openstreetmap": self.nominatim_user_agent,
        }
        return [name for name in self.geocoding_provider_order if credentials.get(name)]

    def get_available_llm_providers(self) -> list[str]:
        """Return LLM provider names that have non-empty API keys configured."""
        providers: list[str] = []
        if self.gemini_api_key:
            providers.append("gemini")
        if self.anthropic_api_key:
            providers.append("anthropic")
        return providers

    def ttl_for(self, kind: EnrichmentKind) -> int:
        """Return the TTL in seconds configured for *kind*."""
        return int(getattr(self, f"ttl_{kind.value}_seconds"))
