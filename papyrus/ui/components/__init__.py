"""Reusable UI components for letter display."""

from .panels import LetterPanel
from .tables import ContactTable, LetterTable, format_timestamp

__all__ = [
    "ContactTable",
    "LetterPanel",
    "LetterTable",
    "format_timestamp",
]
