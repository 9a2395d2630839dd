"""LLM provider adapters.

GeminiLLMProvider is preferred when GEMINI_API_KEY is set;
AnthropicLLMProvider is used when only ANTHROPIC_API_KEY is set.
"""

from relieflink.providers.llm.anthropic_provider import AnthropicLLMProvider
from relieflink.providers.llm.gemini_provider import GeminiLLMProvider

__all__ = ["AnthropicLLMProvider", "GeminiLLMProvider"]
