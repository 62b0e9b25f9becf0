"""Query builders using SQLAlchemy Core for type-safe letter queries."""

from typing import Iterable, Optional

from sqlalchemy import Select, and_, select
from sqlalchemy.sql import ColumnElement

from papyrus.core.database.models import contacts, letters, user_profiles
from papyrus.core.models.letter import FeedKind, FilterSpec
from papyrus.core.validation import Timestamps

LETTER_COLUMNS = (
    letters.c.id,
    letters.c.author_id,
    letters.c.recipient_id,
    letters.c.content,
    letters.c.created_at,
    letters.c.updated_at,
    letters.c.is_read,
    letters.c.read_at,
)


class LetterQueryBuilder:
    """Composes letter queries from a base predicate and a FilterSpec.

    Builders never execute anything; the same inputs always compile to the
    same statement.
    """

    @staticmethod
    def owner_column(feed: FeedKind) -> ColumnElement:
        """Column holding the current user's id for a feed."""
        return letters.c.recipient_id if feed is FeedKind.INBOX else letters.c.author_id

    @staticmethod
    def correlated_column(feed: FeedKind) -> ColumnElement:
        """Column that contact filtering applies to for a feed.

        Inbox letters are filtered by who wrote them, sent letters by who
        they were addressed to.
        """
        return letters.c.author_id if feed is FeedKind.INBOX else letters.c.recipient_id

    @staticmethod
    def base_query(
        feed: FeedKind, user_id: str, is_read: Optional[bool] = None
    ) -> Select:
        """Build the unfiltered, unordered query for a user's feed.

        Args:
            feed: Inbox or sent
            user_id: Current user id
            is_read: Restrict to read (True) or unread (False) letters

        Returns:
            SQLAlchemy Select statement
        """
        query = select(*LETTER_COLUMNS).where(
            LetterQueryBuilder.owner_column(feed) == user_id
        )
        if is_read is not None:
            query = query.where(letters.c.is_read == is_read)
        return query

    @staticmethod
    def filter_clauses(
        filters: Optional[FilterSpec], feed: FeedKind
    ) -> list[ColumnElement[bool]]:
        """Translate a FilterSpec into WHERE clauses (possibly none)."""
        if filters is None:
            return []

        clauses = []

        if filters.contact_ids:
            clauses.append(
                LetterQueryBuilder.correlated_column(feed).in_(
                    sorted(filters.contact_ids)
                )
            )
        if filters.before_date is not None:
            clauses.append(letters.c.created_at < Timestamps.to_iso(filters.before_date))
        if filters.after_date is not None:
            clauses.append(letters.c.created_at > Timestamps.to_iso(filters.after_date))

        return clauses

    @staticmethod
    def apply_filters(
        query: Select, filters: Optional[FilterSpec], feed: FeedKind
    ) -> Select:
        """AND the active filter restrictions onto ``query``.

        Returns ``query`` itself when no restriction is active.
        """
        clauses = LetterQueryBuilder.filter_clauses(filters, feed)
        if not clauses:
            return query
        return query.where(and_(*clauses))

    @staticmethod
    def order_by_created(query: Select, ascending: bool) -> Select:
        """Order by creation time, breaking ties by id."""
        if ascending:
            return query.order_by(letters.c.created_at.asc(), letters.c.id.asc())
        return query.order_by(letters.c.created_at.desc(), letters.c.id.desc())

    @staticmethod
    def feed_query(
        feed: FeedKind,
        user_id: str,
        filters: Optional[FilterSpec] = None,
        is_read: Optional[bool] = None,
        ascending: bool = False,
    ) -> Select:
        """Build a complete, ordered feed query."""
        query = LetterQueryBuilder.base_query(feed, user_id, is_read=is_read)
        query = LetterQueryBuilder.apply_filters(query, filters, feed)
        return LetterQueryBuilder.order_by_created(query, ascending)

    @staticmethod
    def letter_by_id(letter_id: str) -> Select:
        """Build a lookup for a single letter."""
        return select(*LETTER_COLUMNS).where(letters.c.id == letter_id).limit(1)

    @staticmethod
    def letters_by_prefix(feed: FeedKind, user_id: str, id_prefix: str) -> Select:
        """Build a lookup of a user's letters whose id starts with ``id_prefix``.

        Read state is ignored, so letters hidden behind the unread partition
        are found too.
        """
        return (
            LetterQueryBuilder.base_query(feed, user_id)
            .where(letters.c.id.startswith(id_prefix, autoescape=True))
            .order_by(letters.c.id.asc())
        )

    @staticmethod
    def profiles_by_id(user_ids: Iterable[str]) -> Select:
        """Build a lookup of user profiles for the given ids."""
        return select(
            user_profiles.c.id,
            user_profiles.c.display_label,
            user_profiles.c.last_login_at,
        ).where(user_profiles.c.id.in_(sorted(set(user_ids))))

    @staticmethod
    def contacts_for(user_id: str) -> Select:
        """Build the owner's contact list query, ordered by display name."""
        return (
            select(contacts)
            .where(contacts.c.user_id == user_id)
            .order_by(contacts.c.display_name.asc())
        )
