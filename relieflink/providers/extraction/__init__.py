"""Location-extraction providers (free text -> place names)."""

from relieflink.providers.extraction.llm_location_extractor import LLMLocationExtractor
from relieflink.providers.extraction.pattern_location_extractor import PatternLocationExtractor

__all__ = ["LLMLocationExtractor", "PatternLocationExtractor"]
