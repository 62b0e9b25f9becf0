"""Domain models."""

from .contact import Contact
from .letter import FeedKind, FilterSpec, Letter, UserSummary

__all__ = ["Contact", "FeedKind", "FilterSpec", "Letter", "UserSummary"]
