"""Google Gemini LLM provider adapter.

Calls the Generative Language REST API (``models/{model}:generateContent``)
through the shared ``httpx.AsyncClient``.  The API key travels in the
``x-goog-api-key`` header rather than the query string so it never shows up
in access logs.
"""

from __future__ import annotations

import httpx
import structlog

from relieflink.config.settings import Settings
from relieflink.interfaces.llm_provider import ILLMProvider
from relieflink.utils.errors import MalformedProviderResponseError, ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiLLMProvider(ILLMProvider):
    """LLM provider backed by the Gemini ``generateContent`` endpoint."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._api_key = settings.gemini_api_key
        self._model = settings.gemini_model
        self._timeout = settings.llm_timeout_seconds
        self._http = http_client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 1024,
    ) -> str:
        if not self.is_available():
            raise ProviderUnavailableError(
                message="Gemini API key not configured",
                provider_name=self.get_provider_name(),
            )

        body = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        try:
            response = await self._http.post(
                f"{_API_BASE}/{self._model}:generateContent",
                json=body,
                headers={"x-goog-api-key": self._api_key},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException:
            raise
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                message=f"Gemini API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        data = response.json()
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise MalformedProviderResponseError(
                message="Invalid response format from Gemini API",
                provider_name=self.get_provider_name(),
            ) from exc

        text = "\n".join(part["text"] for part in parts if part.get("text"))
        if not text:
            raise MalformedProviderResponseError(
                message="Gemini returned no text content",
                provider_name=self.get_provider_name(),
            )

        usage = data.get("usageMetadata", {})
        logger.info(
            "gemini_completion",
            model=self._model,
            input_tokens=usage.get("promptTokenCount"),
            output_tokens=usage.get("candidatesTokenCount"),
        )
        return text

    def is_available(self) -> bool:
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return "gemini"
