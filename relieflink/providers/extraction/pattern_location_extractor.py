"""Regex-based location extraction.

Recognises three shapes: ``City, ST``; a capitalised name followed by a
street suffix; and ``downtown``/``uptown``/compass word + capitalised name.
Never fails; an input without matches yields an empty, low-confidence
result.
"""

from __future__ import annotations

import re

from relieflink.interfaces.extraction_provider import ILocationExtractionProvider
from relieflink.models.enrichment import ConfidenceLevel, ExtractedLocations

_CAPITALISED = r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*"

_LOCATION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"\b({_CAPITALISED}),\s*([A-Z]{{2}})\b"),
    re.compile(rf"\b({_CAPITALISED})\s+(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd)\b"),
    re.compile(r"\b(?:[Dd]owntown|[Uu]ptown|[Nn]orth|[Ss]outh|[Ee]ast|[Ww]est)\s+([A-Z][a-z]+)\b"),
)


def find_locations(text: str) -> list[str]:
    """Return distinct location names in pattern order, then text order."""
    found: list[str] = []
    for pattern in _LOCATION_PATTERNS:
        for match in pattern.finditer(text):
            name = match.group(1).strip()
            if name and name not in found:
                found.append(name)
    return found


class PatternLocationExtractor(ILocationExtractionProvider):
    def extract(self, text: str) -> ExtractedLocations:
        locations = find_locations(text)
        return ExtractedLocations(
            locations=locations,
            primary_location=locations[0] if locations else None,
            confidence=ConfidenceLevel.MEDIUM if locations else ConfidenceLevel.LOW,
            method="pattern_matching_fallback",
        )

    async def fetch(self, request: str) -> ExtractedLocations:
        return self.extract(request)

    def is_available(self) -> bool:
        return True

    def get_provider_name(self) -> str:
        return "pattern_matching"
