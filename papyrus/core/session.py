"""Per-login session context shared by the feed services."""

from dataclasses import dataclass
from typing import Callable, Optional

from papyrus.utils.logging import get_logger

logger = get_logger(__name__)

Notifier = Callable[[str, str], None]


@dataclass(frozen=True)
class Identity:
    """The authenticated actor of a session."""

    id: str
    email: Optional[str] = None


class Session:
    """Authentication and notification context for one logged-in user.

    A session is created on login and closed on logout. Services receive it
    explicitly instead of reaching for global state; once closed it reports
    no identity, so any further backend work fails as not authenticated.
    """

    def __init__(
        self,
        identity: Optional[Identity] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._identity = identity
        self._notifier = notifier
        self._closed = False

    @property
    def identity(self) -> Optional[Identity]:
        if self._closed:
            return None
        return self._identity

    def close(self) -> None:
        """Tear the session down on logout."""
        if not self._closed:
            logger.info("Session closed")
        self._closed = True
        self._notifier = None

    def set_notifier(self, notifier: Optional[Notifier]) -> None:
        """Route notifications somewhere else, e.g. to a full-screen UI."""
        self._notifier = notifier

    def notify(self, message: str, level: str = "info") -> None:
        """Forward a user-facing message to the registered notifier."""
        if self._notifier is None:
            return
        self._notifier(message, level)
