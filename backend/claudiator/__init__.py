"""Claudiator event ingestion server."""

__version__ = "0.1.0"
