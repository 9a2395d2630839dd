"""Enrichment payload models.

Pydantic v2 models, frozen like every model in this package.  Each payload
round-trips through the cache store as JSON (``model_dump(mode="json")`` on
write, ``model_validate`` on read).
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ConfidenceLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_score(cls, score: int) -> ConfidenceLevel:
        if score >= 80:
            return cls.HIGH
        if score >= 60:
            return cls.MEDIUM
        return cls.LOW


class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    QUESTIONABLE = "questionable"
    REJECTED = "rejected"


def verification_status_for(score: int) -> VerificationStatus:
    """Map an authenticity score (0-100) to the status stored on a report."""
    if score >= 70:
        return VerificationStatus.VERIFIED
    if score >= 40:
        return VerificationStatus.QUESTIONABLE
    return VerificationStatus.REJECTED


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------


class GeoLocation(BaseModel):
    """A geocoded point with its provenance."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)
    formatted_address: str
    provider: str
    place_id: str | None = None


class ExtractedLocations(BaseModel):
    """Location names pulled out of free text."""

    model_config = ConfigDict(frozen=True)

    locations: list[str] = Field(default_factory=list)
    primary_location: str | None = None
    confidence: ConfidenceLevel = ConfidenceLevel.LOW
    method: str


class LocationLookup(BaseModel):
    """Result of extracting a location from text and geocoding it."""

    model_config = ConfigDict(frozen=True)

    input_text: str
    extracted: ExtractedLocations
    geocoding: GeoLocation | None = None
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )


# ---------------------------------------------------------------------------
# Content analysis
# ---------------------------------------------------------------------------


class AnalysisRequest(BaseModel):
    """Report text to judge, with an optional image URL."""

    model_config = ConfigDict(frozen=True)

    text: str
    media_ref: str | None = None


class ContentAnalysis(BaseModel):
    """Authenticity judgement for a report's text and optional image.

    The heuristic fallback and the generative provider both produce this
    exact shape; only ``provider`` tells them apart.
    """

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    confidence_level: ConfidenceLevel
    notes: str
    flags: list[str] = Field(default_factory=list)
    disaster_type: str = "unspecified"
    provider: str

    @property
    def verification_status(self) -> VerificationStatus:
        return verification_status_for(self.score)
