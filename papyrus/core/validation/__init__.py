"""Domain validation utilities."""

from .timestamps import Timestamps

__all__ = ["Timestamps"]
