"""ReliefLink: enrichment and real-time distribution core for disaster response."""

__version__ = "0.1.0"
