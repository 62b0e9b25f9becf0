"""Papyrus: a slow-correspondence letter client."""

__version__ = "0.1.0"
