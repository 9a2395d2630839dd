"""Generative content analysis backed by any :class:`ILLMProvider`."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from relieflink.interfaces.analysis_provider import IContentAnalysisProvider
from relieflink.interfaces.llm_provider import ILLMProvider
from relieflink.models.enrichment import AnalysisRequest, ConfidenceLevel, ContentAnalysis
from relieflink.utils.llm_json import extract_json_object

_SYSTEM_PROMPT = (
    "You assess disaster reports for authenticity on behalf of emergency "
    "coordinators. Answer with a single JSON object and nothing else."
)

_USER_PROMPT = """\
Analyse this disaster report for authenticity and context. Evaluate:
1. Does it appear to describe genuine disaster damage or emergency conditions?
2. Are there signs of manipulation, staging, or inconsistencies?
3. How credible is it overall?
4. What type of disaster or emergency is it, if identifiable?

Report text: {text}
Image URL: {media_ref}

Respond with JSON containing:
- authenticity_score (integer 0-100, where 100 is highly authentic)
- confidence_level ("low", "medium" or "high")
- analysis_notes (brief explanation)
- disaster_type (if identifiable, else "unspecified")
- flags (array of short snake_case concerns)
"""


class _Verdict(BaseModel):
    """The JSON shape requested from the model."""

    model_config = ConfigDict(extra="ignore")

    authenticity_score: int = Field(ge=0, le=100)
    confidence_level: ConfidenceLevel
    analysis_notes: str = ""
    disaster_type: str = "unspecified"
    flags: list[str] = Field(default_factory=list)

    @field_validator("confidence_level", mode="before")
    @classmethod
    def _lowercase(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value

    @field_validator("disaster_type", mode="before")
    @classmethod
    def _default_type(cls, value: object) -> object:
        return value or "unspecified"


class LLMAnalysisProvider(IContentAnalysisProvider):
    """Authenticity verdicts from a generative model.

    A reply that cannot be parsed into the verdict shape raises
    ``MalformedProviderResponseError`` (or ``ValidationError``), which the
    provider base turns into a failure so the heuristic floor answers.
    """

    def __init__(self, llm: ILLMProvider, timeout: float | None = None) -> None:
        self._llm = llm
        self.timeout = timeout

    async def fetch(self, request: AnalysisRequest) -> ContentAnalysis:
        reply = await self._llm.complete(
            system_prompt=_SYSTEM_PROMPT,
            user_prompt=_USER_PROMPT.format(
                text=request.text,
                media_ref=request.media_ref or "none",
            ),
        )
        verdict = _Verdict.model_validate(
            extract_json_object(reply, provider_name=self.get_provider_name())
        )
        return ContentAnalysis(
            score=verdict.authenticity_score,
            confidence_level=verdict.confidence_level,
            notes=verdict.analysis_notes,
            flags=verdict.flags,
            disaster_type=verdict.disaster_type,
            provider=self.get_provider_name(),
        )

    def is_available(self) -> bool:
        return self._llm.is_available()

    def get_provider_name(self) -> str:
        return self._llm.get_provider_name()
