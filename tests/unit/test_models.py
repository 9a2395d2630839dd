"""Unit tests for enrichment, event and outcome models."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from relieflink.models.cache import CacheEntry
from relieflink.models.enrichment import (
    ConfidenceLevel,
    ContentAnalysis,
    GeoLocation,
    VerificationStatus,
    verification_status_for,
)
from relieflink.models.events import MutationEvent, MutationKind
from relieflink.models.outcome import Failure, FailureKind, Success
from relieflink.utils.errors import AllProvidersFailedError, ProviderUnavailableError


# ======================================================================
# Scores and levels
# ======================================================================


class TestConfidenceLevel:
    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (100, ConfidenceLevel.HIGH),
            (80, ConfidenceLevel.HIGH),
            (79, ConfidenceLevel.MEDIUM),
            (60, ConfidenceLevel.MEDIUM),
            (59, ConfidenceLevel.LOW),
            (0, ConfidenceLevel.LOW),
        ],
    )
    def test_from_score(self, score: int, expected: ConfidenceLevel) -> None:
        assert ConfidenceLevel.from_score(score) is expected


class TestVerificationStatus:
    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (70, VerificationStatus.VERIFIED),
            (69, VerificationStatus.QUESTIONABLE),
            (40, VerificationStatus.QUESTIONABLE),
            (39, VerificationStatus.REJECTED),
        ],
    )
    def test_thresholds(self, score: int, expected: VerificationStatus) -> None:
        assert verification_status_for(score) is expected

    def test_content_analysis_exposes_status(self) -> None:
        analysis = ContentAnalysis(
            score=85,
            confidence_level=ConfidenceLevel.HIGH,
            notes="ok",
            provider="gemini",
        )
        assert analysis.verification_status is VerificationStatus.VERIFIED
        assert analysis.disaster_type == "unspecified"


# ======================================================================
# Payload validation
# ======================================================================


class TestGeoLocation:
    def test_valid(self) -> None:
        geo = GeoLocation(lat=40.72, lng=-74.01, formatted_address="NYC", provider="mapbox")
        assert geo.place_id is None

    def test_latitude_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            GeoLocation(lat=91, lng=0, formatted_address="x", provider="mapbox")

    def test_frozen(self) -> None:
        geo = GeoLocation(lat=1, lng=2, formatted_address="x", provider="mapbox")
        with pytest.raises(ValidationError):
            geo.lat = 3  # type: ignore[misc]

    def test_json_round_trip(self) -> None:
        geo = GeoLocation(lat=1.5, lng=2.5, formatted_address="x", provider="google_maps", place_id="p")
        assert GeoLocation.model_validate(geo.model_dump(mode="json")) == geo


class TestContentAnalysis:
    def test_score_bounds(self) -> None:
        with pytest.raises(ValidationError):
            ContentAnalysis(
                score=101,
                confidence_level=ConfidenceLevel.HIGH,
                notes="",
                provider="gemini",
            )


class TestCacheEntry:
    def test_is_expired(self) -> None:
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)  # noqa: UP017
        entry = CacheEntry(key="k", value=1, expires_at=now + timedelta(seconds=5), created_at=now)
        assert entry.is_expired(now) is False
        assert entry.is_expired(now + timedelta(seconds=5)) is True


class TestMutationEvent:
    def test_to_message_is_json_ready(self) -> None:
        event = MutationEvent(
            topic="disaster:1",
            kind=MutationKind.UPDATE,
            event="disaster_updated",
            payload={"id": 1, "title": "Flood"},
        )
        message = event.to_message()
        assert message["topic"] == "disaster:1"
        assert message["kind"] == "update"
        assert message["event"] == "disaster_updated"
        assert message["payload"] == {"id": 1, "title": "Flood"}
        assert isinstance(message["timestamp"], str)


# ======================================================================
# Tagged outcomes and errors
# ======================================================================


class TestOutcome:
    def test_success_unwrap(self) -> None:
        success = Success(payload={"a": 1}, provider="mapbox")
        assert success.ok is True
        assert success.cached is False
        assert success.unwrap() == {"a": 1}

    def test_aggregate_reasons_in_order(self) -> None:
        failure = Failure.aggregate(
            [
                Failure(FailureKind.TIMEOUT, "no answer within 10s", provider="google_maps"),
                Failure(FailureKind.PROVIDER_UNAVAILABLE, "503", provider="mapbox"),
            ]
        )
        assert failure.ok is False
        assert failure.kind is FailureKind.ALL_PROVIDERS_FAILED
        assert failure.reasons == ["google_maps: no answer within 10s", "mapbox: 503"]

    def test_failure_unwrap_raises(self) -> None:
        failure = Failure.aggregate(
            [Failure(FailureKind.TIMEOUT, "slow", provider="a")], reason="All 1 geocode providers failed"
        )
        with pytest.raises(AllProvidersFailedError) as exc_info:
            failure.unwrap()
        assert exc_info.value.failure is failure
        assert str(exc_info.value) == "All 1 geocode providers failed"


class TestErrors:
    def test_str_includes_provider(self) -> None:
        exc = ProviderUnavailableError("Mapbox geocoding returned no results", provider_name="mapbox")
        assert str(exc) == "[mapbox] Mapbox geocoding returned no results"
        assert exc.message == "Mapbox geocoding returned no results"
        assert exc.provider_name == "mapbox"

    def test_str_without_provider(self) -> None:
        assert str(ProviderUnavailableError("down")) == "down"
