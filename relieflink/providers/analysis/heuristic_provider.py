"""Deterministic keyword heuristic for content analysis.

The last link of the content-analysis chain.  It needs no configuration,
performs no I/O and never raises, so analysis always produces an answer.
Scores start from a neutral baseline and move with simple textual signals;
the result has exactly the same shape as a generative verdict.
"""

from __future__ import annotations

import re

from relieflink.interfaces.analysis_provider import IContentAnalysisProvider
from relieflink.models.enrichment import AnalysisRequest, ConfidenceLevel, ContentAnalysis

_BASELINE_SCORE = 60
_MANUAL_REVIEW_THRESHOLD = 70

_NOTES = (
    "Automated heuristic analysis completed. "
    "Manual review recommended for critical decisions."
)

_OFFICIAL_SOURCES = (
    "official",
    "fema",
    "red cross",
    "police",
    "fire department",
    "national weather service",
    "evacuation order",
    "emergency management",
)

_DOUBT_MARKERS = (
    "fake",
    "hoax",
    "unconfirmed",
    "rumor",
    "rumour",
    "photoshop",
    "allegedly",
    "share before",
    "not verified",
)

_URGENT_MARKERS = ("sos", "urgent", "trapped", "need help", "stranded", "injured")

# First match wins.
_DISASTER_TYPES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("earthquake", ("earthquake", "aftershock", "tremor")),
    ("tsunami", ("tsunami",)),
    ("hurricane", ("hurricane", "typhoon", "cyclone")),
    ("tornado", ("tornado",)),
    ("wildfire", ("wildfire", "forest fire", "bushfire")),
    ("fire", ("fire", "blaze", "smoke")),
    ("flood", ("flood", "flooding", "flash flood", "storm surge")),
    ("landslide", ("landslide", "mudslide")),
)

_NUMBER_RE = re.compile(r"\d")
_PLACE_RE = re.compile(
    r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*(?:,\s*[A-Z]{2}\b|\s+(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd)\b)"
)


def _contains_any(text: str, markers: tuple[str, ...]) -> list[str]:
    return [m for m in markers if re.search(rf"\b{re.escape(m)}\b", text)]


def _shouting(text: str) -> bool:
    letters = [c for c in text if c.isalpha()]
    if len(letters) < 12:
        return False
    return sum(c.isupper() for c in letters) / len(letters) > 0.6


def _classify(lowered: str) -> str:
    for disaster_type, keywords in _DISASTER_TYPES:
        if _contains_any(lowered, keywords):
            return disaster_type
    return "unspecified"


class HeuristicAnalysisProvider(IContentAnalysisProvider):
    """Always-available, deterministic analysis."""

    def analyze(self, request: AnalysisRequest) -> ContentAnalysis:
        text = request.text.strip()
        lowered = text.lower()
        score = _BASELINE_SCORE
        flags: list[str] = []

        if not text:
            flags.append("no_text")
        else:
            score += 8 * min(len(_contains_any(lowered, _OFFICIAL_SOURCES)), 2)
            if _NUMBER_RE.search(text):
                score += 5
            if _PLACE_RE.search(text):
                score += 5

            doubts = _contains_any(lowered, _DOUBT_MARKERS)
            if doubts:
                score -= 15 * len(doubts)
                flags.append("unverified_claim_language")
            if _shouting(text) or "!!!" in text:
                score -= 10
                flags.append("sensational_formatting")
            if _contains_any(lowered, _URGENT_MARKERS):
                flags.append("urgent_need")

        if request.media_ref:
            flags.append("image_not_inspected")

        score = max(0, min(100, score))
        if score < _MANUAL_REVIEW_THRESHOLD:
            flags.append("requires_manual_review")

        return ContentAnalysis(
            score=score,
            confidence_level=ConfidenceLevel.from_score(score),
            notes=_NOTES,
            flags=flags,
            disaster_type=_classify(lowered),
            provider=self.get_provider_name(),
        )

    async def fetch(self, request: AnalysisRequest) -> ContentAnalysis:
        return self.analyze(request)

    def is_available(self) -> bool:
        return True

    def get_provider_name(self) -> str:
        return "heuristic"
