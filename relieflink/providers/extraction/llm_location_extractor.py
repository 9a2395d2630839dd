"""Location extraction backed by any :class:`ILLMProvider`."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from relieflink.interfaces.extraction_provider import ILocationExtractionProvider
from relieflink.interfaces.llm_provider import ILLMProvider
from relieflink.models.enrichment import ConfidenceLevel, ExtractedLocations
from relieflink.utils.llm_json import extract_json_object

_SYSTEM_PROMPT = (
    "You extract place names from disaster reports. "
    "Answer with a single JSON object and nothing else."
)

_USER_PROMPT = """\
Extract location names from the following text. Look for:
- City names, neighborhoods, districts
- Street names, addresses
- Landmarks, buildings
- Geographic references

Text: "{text}"

Respond with a JSON object containing:
- locations: array of location names found
- primary_location: the most specific/relevant location, or null
- confidence: "low", "medium" or "high"

If no clear location is found, return an empty locations array.
"""


class _Extraction(BaseModel):
    model_config = ConfigDict(extra="ignore")

    locations: list[str] = Field(default_factory=list)
    primary_location: str | None = None
    confidence: ConfidenceLevel = ConfidenceLevel.LOW

    @field_validator("confidence", mode="before")
    @classmethod
    def _lowercase(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value


class LLMLocationExtractor(ILocationExtractionProvider):
    def __init__(self, llm: ILLMProvider, timeout: float | None = None) -> None:
        self._llm = llm
        self.timeout = timeout

    async def fetch(self, request: str) -> ExtractedLocations:
        reply = await self._llm.complete(
            system_prompt=_SYSTEM_PROMPT,
            user_prompt=_USER_PROMPT.format(text=request),
        )
        parsed = _Extraction.model_validate(
            extract_json_object(reply, provider_name=self.get_provider_name())
        )
        locations = [loc.strip() for loc in parsed.locations if loc and loc.strip()]
        primary = (parsed.primary_location or "").strip() or (locations[0] if locations else None)
        return ExtractedLocations(
            locations=locations,
            primary_location=primary,
            confidence=parsed.confidence,
            method="llm",
        )

    def is_available(self) -> bool:
        return self._llm.is_available()

    def get_provider_name(self) -> str:
        return f"{self._llm.get_provider_name()}_extraction"
