"""keygate: API key authentication gate service."""

__version__ = "1.0.0"
