"""SQLAlchemy table definitions for letters, contacts and profiles."""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    UniqueConstraint,
)

from papyrus.core.database.base import metadata
from papyrus.core.validation import Timestamps


def _new_id() -> str:
    return str(uuid.uuid4())


def _now_iso() -> str:
    return Timestamps.to_iso(Timestamps.now())


def _timestamp_column(name: str, nullable: bool = False) -> Column:
    """ISO-8601 UTC timestamp stored as text, stamped by the store."""
    if nullable:
        return Column(name, String(32), nullable=True)
    return Column(name, String(32), nullable=False, default=_now_iso)


user_profiles = Table(
    "user_profiles",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("display_label", String(255), nullable=True),
    _timestamp_column("last_login_at", nullable=True),
    _timestamp_column("created_at"),
    _timestamp_column("updated_at"),
)

letters = Table(
    "letters",
    metadata,
    Column("id", String(36), primary_key=True, default=_new_id),
    Column("author_id", String(64), nullable=False, index=True),
    Column("recipient_id", String(64), nullable=False, index=True),
    Column("content", Text, nullable=False),
    _timestamp_column("created_at"),
    _timestamp_column("updated_at"),
    Column("is_read", Boolean, nullable=False, default=False, server_default="0"),
    _timestamp_column("read_at", nullable=True),
    Index("ix_letters_inbox", "recipient_id", "is_read", "created_at"),
    Index("ix_letters_sent", "author_id", "created_at"),
)

contacts = Table(
    "contacts",
    metadata,
    Column("id", String(36), primary_key=True, default=_new_id),
    Column("user_id", String(64), nullable=False, index=True),
    Column(
        "contact_user_id",
        String(64),
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("display_name", String(255), nullable=False),
    _timestamp_column("created_at"),
    UniqueConstraint("user_id", "contact_user_id", name="uq_contacts_owner_contact"),
)
