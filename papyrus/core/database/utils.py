"""Database row conversion utilities."""

from typing import Optional

from papyrus.core.models import Contact, Letter, UserSummary
from papyrus.core.validation import Timestamps


def row_to_letter(
    row,
    author: Optional[UserSummary] = None,
    recipient: Optional[UserSummary] = None,
) -> Letter:
    """Convert a ``letters`` row to a Letter domain object.

    Args:
        row: Mapping with the ``letters`` columns
        author: Optional display summary of the author
        recipient: Optional display summary of the recipient

    Returns:
        Letter domain object
    """
    return Letter(
        id=str(row["id"]),
        author_id=row["author_id"],
        recipient_id=row["recipient_id"],
        content=row["content"] or "",
        created_at=Timestamps.parse(row["created_at"]),
        updated_at=Timestamps.parse(row["updated_at"]),
        is_read=bool(row["is_read"]),
        read_at=Timestamps.parse(row.get("read_at")),
        author=author,
        recipient=recipient,
    )


def row_to_contact(row) -> Contact:
    """Convert a ``contacts`` row to a Contact domain object."""
    return Contact(
        id=str(row["id"]),
        user_id=row["user_id"],
        contact_user_id=row["contact_user_id"],
        display_name=row["display_name"],
        created_at=Timestamps.parse(row["created_at"]),
    )
