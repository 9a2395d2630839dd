from relieflink.config.settings import EnrichmentKind, Settings

__all__ = ["EnrichmentKind", "Settings"]
