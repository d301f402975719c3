"""JWT Pizza ordering service."""

__version__ = "0.1.0"
