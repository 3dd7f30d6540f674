"""duelcore: authoritative engine for two-player card battles."""

__version__ = "0.1.0"
