"""Abstract base class for LLM service providers.

Used by the generative analysis and location-extraction adapters.  Keeping
the call-site provider-agnostic lets Gemini and Claude be swapped by
configuration alone.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: GeminiLLMProvider, AnthropicLLMProvider
# Located in: relieflink/providers/llm/
class ILLMProvider(ABC):
    """Contract for text-completion LLM services."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 1024,
    ) -> str:
        """Generate a text completion from the model.

        Parameters
        ----------
        system_prompt:
            The system/instruction message that sets the model's behaviour.
        user_prompt:
            The prompt containing the actual request or data.
        temperature:
            Sampling temperature (0.0 = deterministic).
        max_tokens:
            Upper bound on the number of tokens in the response.

        Raises
        ------
        relieflink.utils.errors.ProviderUnavailableError
            If the API call fails or returns no text.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"gemini"`` or ``"anthropic"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are present (no network call)."""
