"""Letter feed retrieval and read-state synchronisation."""

from datetime import datetime
from typing import Callable, Dict, Mapping, Optional, Tuple

from sqlalchemy import and_

from papyrus.core.database import SERVER_NOW, LetterBackend, LetterQueryBuilder, letters
from papyrus.core.database.utils import row_to_letter
from papyrus.core.models import FeedKind, FilterSpec, Letter, UserSummary
from papyrus.core.session import Identity, Session
from papyrus.core.validation import Timestamps
from papyrus.utils.config_manager import RetryConfig
from papyrus.utils.errors import (
    ErrorHandler,
    ForbiddenError,
    LetterNotFoundError,
    NotAuthenticatedError,
    PapyrusError,
    classify_error,
)
from papyrus.utils.logging import async_log_call, get_logger, log_event
from papyrus.utils.retry import retry_with_backoff

logger = get_logger(__name__)

LetterSequence = Tuple[Letter, ...]


class LetterFeedService:
    """Owns the visible letter sequence of one feed.

    Every fetch is a single retryable unit that starts again from identity
    resolution. Fetches are tagged with a generation number; a response
    that arrives after a newer fetch (or a local mutation) has started is
    discarded rather than applied.
    """

    kind: FeedKind

    def __init__(
        self,
        session: Session,
        backend: LetterBackend,
        filters: Optional[FilterSpec] = None,
        retry: Optional[RetryConfig] = None,
        sleep=None,
        clock: Optional[Callable[[], datetime]] = None,
        contact_labels: Optional[Mapping[str, str]] = None,
    ):
        """Initialise a feed.

        Args:
            session: Session of the logged-in user
            backend: Backend query interface
            filters: Initial filters (none by default)
            retry: Retry settings for backend calls
            sleep: Awaitable sleep used between retries
            clock: Source of local timestamps for optimistic updates
            contact_labels: Display names keyed by user id
        """
        self.session = session
        self.backend = backend
        self.retry = retry or RetryConfig()
        self._sleep = sleep
        self._clock = clock or Timestamps.now
        self._filters = filters or FilterSpec()
        self._labels: Dict[str, str] = dict(contact_labels or {})

        self._letters: LetterSequence = ()
        self._generation = 0
        self._loading_generation: Optional[int] = None
        self._applied_fetches = 0

        self.is_loading = False
        self.error: Optional[str] = None
        self.last_error: Optional[PapyrusError] = None
        self.retry_count = 0

    @property
    def letters(self) -> LetterSequence:
        return self._letters

    @property
    def filters(self) -> FilterSpec:
        return self._filters

    def set_filters(self, filters: Optional[FilterSpec]) -> None:
        """Replace the active filters; callers re-fetch afterwards."""
        self._filters = filters or FilterSpec()

    def set_contact_labels(self, labels: Mapping[str, str]) -> None:
        self._labels = dict(labels)

    def _summary(self, user_id: str, last_login_at=None) -> UserSummary:
        return UserSummary(
            id=user_id,
            label=self._labels.get(user_id, user_id),
            last_login_at=last_login_at,
        )

    def _bump_generation(self) -> int:
        self._generation += 1
        return self._generation

    async def _require_identity(self) -> Identity:
        identity = await self.backend.current_identity()
        if identity is None:
            raise NotAuthenticatedError("User not authenticated")
        return identity

    async def _with_retry(self, operation, context: str):
        return await retry_with_backoff(
            operation,
            max_attempts=self.retry.max_attempts,
            initial_delay=self.retry.initial_delay,
            sleep=self._sleep,
            context=context,
        )

    async def _load(self) -> LetterSequence:
        raise NotImplementedError

    @async_log_call
    async def fetch(self) -> LetterSequence:
        """Retrieve the feed and replace the visible sequence.

        A failed fetch keeps the previous sequence, records a user-facing
        message in ``error`` and counts the failure in ``retry_count``.

        Returns:
            The visible sequence after the fetch
        """
        generation = self._bump_generation()
        context = f"{type(self).__name__}.fetch"
        self._loading_generation = generation
        self.is_loading = True
        self.error = None

        try:
            result = await self._with_retry(self._load, context)

        except Exception as e:
            if generation != self._generation:
                logger.debug(f"{context}: ignoring failure of superseded fetch")
                return self._letters

            classified = classify_error(e)
            ErrorHandler.handle(e, context)
            self.error = classified.user_message
            self.last_error = classified
            self.retry_count += 1
            return self._letters

        finally:
            # Only the most recent fetch clears the flag
            if self._loading_generation == generation:
                self._loading_generation = None
                self.is_loading = False

        if generation != self._generation:
            logger.debug(f"{context}: discarding stale response")
            return self._letters

        self._letters = result
        self._applied_fetches += 1
        self.last_error = None
        logger.debug(f"{context}: {len(result)} letter(s)")
        return result

    async def update_filters(self, filters: Optional[FilterSpec]) -> LetterSequence:
        """Replace the filters and fetch again."""
        self.set_filters(filters)
        return await self.fetch()


class InboxFeedService(LetterFeedService):
    """Letters addressed to the current user.

    Unread letters come first, oldest first. Only when nothing is unread
    does the feed fall back to read letters, newest first; the two are never
    mixed in one sequence.
    """

    kind = FeedKind.INBOX

    def _to_letter(self, row) -> Letter:
        return row_to_letter(row, author=self._summary(row["author_id"]))

    async def _load(self) -> LetterSequence:
        identity = await self._require_identity()

        unread_query = LetterQueryBuilder.feed_query(
            self.kind, identity.id, self._filters, is_read=False, ascending=True
        )
        unread_rows = await self.backend.select(unread_query)
        if unread_rows:
            return tuple(self._to_letter(row) for row in unread_rows)

        read_query = LetterQueryBuilder.feed_query(
            self.kind, identity.id, self._filters, is_read=True, ascending=False
        )
        read_rows = await self.backend.select(read_query)
        return tuple(self._to_letter(row) for row in read_rows)

    async def lookup(self, id_prefix: str) -> LetterSequence:
        """Letters addressed to the current user whose id starts with ``id_prefix``.

        Unlike the feed this includes read letters while unread ones exist.
        The visible sequence is left untouched.
        """

        async def load() -> LetterSequence:
            identity = await self._require_identity()
            rows = await self.backend.select(
                LetterQueryBuilder.letters_by_prefix(self.kind, identity.id, id_prefix)
            )
            return tuple(self._to_letter(row) for row in rows)

        return await self._with_retry(load, "InboxFeedService.lookup")

    async def _persist_read(self, letter_id: str):
        identity = await self._require_identity()

        row = await self.backend.update(
            letters,
            and_(
                letters.c.id == letter_id,
                letters.c.recipient_id == identity.id,
                letters.c.is_read == False,  # noqa: E712
            ),
            {"is_read": True, "read_at": SERVER_NOW},
        )
        if row is not None:
            return row

        # Nothing matched: work out why
        existing = await self.backend.select(LetterQueryBuilder.letter_by_id(letter_id))
        if not existing:
            raise LetterNotFoundError(
                f"Letter {letter_id} not found", details={"letter_id": letter_id}
            )
        if existing[0]["recipient_id"] != identity.id:
            raise ForbiddenError(
                "Letter is not addressed to the current user",
                details={"letter_id": letter_id},
            )

        # Already read elsewhere; read state is one-way so this is success
        return existing[0]

    @async_log_call
    async def mark_as_read(self, letter_id: str) -> LetterSequence:
        """Mark a letter read, optimistically.

        The in-memory copy flips to read at once. The backend update runs
        under the retry policy; on success the feed is fetched again so the
        unread/read partition re-sorts, on failure the exact previous
        sequence is restored and the classified error is raised. Snapshots
        are per call, so racing rollbacks are last-writer-wins; a rollback is
        skipped when a fetch has replaced the sequence in the meantime.

        Marking a letter that is not in the sequence, or already read, is a
        no-op.

        Raises:
            PapyrusError: If the backend update ultimately fails
        """
        snapshot = self._letters
        target = next((letter for letter in snapshot if letter.id == letter_id), None)
        if target is None or target.is_read:
            logger.debug(f"mark_as_read ignored for letter {letter_id}")
            return snapshot

        # Optimistic apply; also supersedes any fetch still in flight
        self._bump_generation()
        applied_fetches = self._applied_fetches
        read_at = self._clock()
        self._letters = tuple(
            letter.as_read(read_at) if letter.id == letter_id else letter
            for letter in snapshot
        )

        try:
            await self._with_retry(
                lambda: self._persist_read(letter_id), "InboxFeedService.mark_as_read"
            )

        except Exception as e:
            if self._applied_fetches == applied_fetches:
                self._letters = snapshot
                logger.warning(f"Rolled back optimistic read of letter {letter_id}")
            else:
                # A fetch landed meanwhile; its sequence is newer than the snapshot
                logger.warning(
                    f"Optimistic read of letter {letter_id} failed; "
                    "keeping the sequence from a newer fetch"
                )
            classified = classify_error(e)
            ErrorHandler.handle(e, "InboxFeedService.mark_as_read")
            self.error = classified.user_message
            self.last_error = classified
            self.session.notify(classified.user_message, "error")
            if classified is e:
                raise
            raise classified from e

        log_event("letter_read", f"Letter {letter_id} marked as read", letter_id=letter_id)
        return await self.fetch()


class SentFeedService(LetterFeedService):
    """Letters written by the current user, newest first.

    Recipients are decorated with their last login time when the profile
    lookup succeeds; a failed lookup only drops that decoration.
    """

    kind = FeedKind.SENT

    async def _recipient_logins(self, recipient_ids) -> Dict[str, Optional[datetime]]:
        try:
            rows = await self.backend.select(
                LetterQueryBuilder.profiles_by_id(recipient_ids)
            )
        except PapyrusError as e:
            logger.warning(f"Error fetching recipient profiles: {e.message}")
            return {}

        return {row["id"]: Timestamps.parse(row["last_login_at"]) for row in rows}

    async def _load(self) -> LetterSequence:
        identity = await self._require_identity()

        query = LetterQueryBuilder.feed_query(
            self.kind, identity.id, self._filters, ascending=False
        )
        rows = await self.backend.select(query)
        if not rows:
            return ()

        logins = await self._recipient_logins({row["recipient_id"] for row in rows})

        return tuple(
            row_to_letter(
                row,
                recipient=self._summary(
                    row["recipient_id"], logins.get(row["recipient_id"])
                ),
            )
            for row in rows
        )


def create_feed(kind: FeedKind, session: Session, backend: LetterBackend, **kwargs):
    """Create the feed service for ``kind``."""
    if kind is FeedKind.INBOX:
        return InboxFeedService(session, backend, **kwargs)
    return SentFeedService(session, backend, **kwargs)
