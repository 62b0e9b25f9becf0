"""Letter domain models"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Iterable, Optional


class FeedKind(Enum):
    """Which side of the correspondence a feed shows."""

    INBOX = "inbox"
    SENT = "sent"

    @classmethod
    def from_string(cls, value: str) -> "FeedKind":
        """Create FeedKind from string.

        Raises:
            ValueError: If the feed name is invalid.
        """
        try:
            return cls(value.lower())

        except ValueError:
            raise ValueError(f"Invalid feed name: {value}")


@dataclass(frozen=True)
class UserSummary:
    """Denormalised author/recipient label used only for display."""

    id: str
    label: str
    last_login_at: Optional[datetime] = None


@dataclass(frozen=True)
class Letter:
    """Letter domain entity.

    Instances are immutable; state changes produce new copies so feed
    snapshots can be restored verbatim.
    """

    id: str
    author_id: str
    recipient_id: str
    content: str
    created_at: datetime
    updated_at: datetime
    is_read: bool = False
    read_at: Optional[datetime] = None
    author: Optional[UserSummary] = None
    recipient: Optional[UserSummary] = None

    def as_read(self, at: datetime) -> "Letter":
        """Return a read copy, keeping the first read timestamp."""
        if self.is_read:
            return self
        return replace(self, is_read=True, read_at=at)

    def get_preview(self, max_length: int = 80) -> str:
        """Get a single-line preview of the content."""
        text = " ".join(self.content.split())

        if len(text) <= max_length:
            return text

        return text[: max_length - 3] + "..."


@dataclass(frozen=True)
class FilterSpec:
    """Contact and date restrictions applied to a feed.

    An empty ``contact_ids`` set means no contact restriction; several ids
    are OR-ed. Both date bounds are exclusive and compare against
    ``created_at``.
    """

    contact_ids: FrozenSet[str] = field(default_factory=frozenset)
    before_date: Optional[datetime] = None
    after_date: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.contact_ids, frozenset):
            object.__setattr__(self, "contact_ids", frozenset(self.contact_ids))

    @classmethod
    def create(
        cls,
        contact_ids: Optional[Iterable[str]] = None,
        before_date: Optional[datetime] = None,
        after_date: Optional[datetime] = None,
    ) -> "FilterSpec":
        return cls(
            contact_ids=frozenset(contact_ids or ()),
            before_date=before_date,
            after_date=after_date,
        )

    def is_empty(self) -> bool:
        """Check if no restriction is active."""
        return not self.contact_ids and self.before_date is None and self.after_date is None
