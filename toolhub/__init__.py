"""AI tool directory service: catalog, preferences and recommendations."""

__version__ = "0.1.0"
