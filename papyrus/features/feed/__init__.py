"""Letter feeds, contacts and author-side letter operations."""

from .contacts import ContactService
from .operations import LetterOperations
from .service import (
    InboxFeedService,
    LetterFeedService,
    SentFeedService,
    create_feed,
)

__all__ = [
    "ContactService",
    "InboxFeedService",
    "LetterFeedService",
    "LetterOperations",
    "SentFeedService",
    "create_feed",
]
