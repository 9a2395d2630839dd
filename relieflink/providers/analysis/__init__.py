"""Content-analysis providers.

LLMAnalysisProvider asks a generative model for an authenticity verdict;
HeuristicAnalysisProvider is the deterministic floor that always answers.
"""

from relieflink.providers.analysis.heuristic_provider import HeuristicAnalysisProvider
from relieflink.providers.analysis.llm_analysis_provider import LLMAnalysisProvider

__all__ = ["HeuristicAnalysisProvider", "LLMAnalysisProvider"]
