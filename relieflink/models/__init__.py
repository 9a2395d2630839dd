"""Data models shared across ReliefLink services."""

from relieflink.models.cache import CacheEntry
from relieflink.models.enrichment import (
    AnalysisRequest,
    ConfidenceLevel,
    ContentAnalysis,
    ExtractedLocations,
    GeoLocation,
    LocationLookup,
    VerificationStatus,
    verification_status_for,
)
from relieflink.models.events import MutationEvent, MutationKind
from relieflink.models.outcome import Failure, FailureKind, Outcome, Success

__all__ = [
    "AnalysisRequest",
    "CacheEntry",
    "ConfidenceLevel",
    "ContentAnalysis",
    "ExtractedLocations",
    "Failure",
    "FailureKind",
    "GeoLocation",
    "LocationLookup",
    "MutationEvent",
    "MutationKind",
    "Outcome",
    "Success",
    "VerificationStatus",
    "verification_status_for",
]
