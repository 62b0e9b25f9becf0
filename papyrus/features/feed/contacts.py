"""Contact list of the current user."""

from typing import Dict, Optional, Tuple

from papyrus.core.database import LetterBackend, LetterQueryBuilder, contacts
from papyrus.core.database.utils import row_to_contact
from papyrus.core.models import Contact
from papyrus.core.session import Session
from papyrus.utils.config_manager import RetryConfig
from papyrus.utils.errors import (
    ErrorHandler,
    NotAuthenticatedError,
    ValidationError,
    classify_error,
)
from papyrus.utils.logging import get_logger, log_event
from papyrus.utils.retry import retry_with_backoff

logger = get_logger(__name__)

UNKNOWN_USER_MESSAGE = "User ID does not exist. Please check and try again."
DUPLICATE_CONTACT_MESSAGE = "This contact already exists."


class ContactService:
    """Loads and extends the owner's contacts, ordered by display name."""

    def __init__(
        self,
        session: Session,
        backend: LetterBackend,
        retry: Optional[RetryConfig] = None,
        sleep=None,
    ):
        self.session = session
        self.backend = backend
        self.retry = retry or RetryConfig()
        self._sleep = sleep

        self._contacts: Tuple[Contact, ...] = ()
        self.is_loading = False
        self.error: Optional[str] = None

    @property
    def contacts(self) -> Tuple[Contact, ...]:
        return self._contacts

    def labels(self) -> Dict[str, str]:
        """Display names keyed by the contact's user id."""
        return {c.contact_user_id: c.display_name for c in self._contacts}

    async def _owner_id(self) -> str:
        identity = await self.backend.current_identity()
        if identity is None:
            raise NotAuthenticatedError("User not authenticated")
        return identity.id

    async def _load(self) -> Tuple[Contact, ...]:
        owner_id = await self._owner_id()
        rows = await self.backend.select(LetterQueryBuilder.contacts_for(owner_id))
        return tuple(row_to_contact(row) for row in rows)

    async def fetch(self) -> Tuple[Contact, ...]:
        """Reload the contact list; a failure keeps the previous one."""
        self.is_loading = True
        self.error = None
        try:
            self._contacts = await retry_with_backoff(
                self._load,
                max_attempts=self.retry.max_attempts,
                initial_delay=self.retry.initial_delay,
                sleep=self._sleep,
                context="ContactService.fetch",
            )
        except Exception as e:
            classified = classify_error(e)
            ErrorHandler.handle(e, "ContactService.fetch")
            self.error = classified.user_message
        finally:
            self.is_loading = False

        return self._contacts

    async def add(self, contact_user_id: str, display_name: str) -> Contact:
        """Add a contact and reload the list.

        Args:
            contact_user_id: User id of the person to add
            display_name: Local name to show for them

        Returns:
            The stored contact

        Raises:
            ValidationError: If the user does not exist or is already a contact
            PapyrusError: For any other backend failure
        """
        contact_user_id = contact_user_id.strip()
        display_name = display_name.strip()
        if not contact_user_id or not display_name:
            raise ValidationError(
                "Contact user id and display name are required",
                user_message="Please enter both a user ID and a display name.",
            )

        owner_id = await self._owner_id()

        try:
            row = await self.backend.insert(
                contacts,
                {
                    "user_id": owner_id,
                    "contact_user_id": contact_user_id,
                    "display_name": display_name,
                },
            )
        except ValidationError as e:
            constraint = e.details.get("constraint")
            if constraint == "foreign_key":
                raise ValidationError(
                    e.message, details=e.details, user_message=UNKNOWN_USER_MESSAGE
                ) from e
            if constraint == "unique":
                raise ValidationError(
                    e.message, details=e.details, user_message=DUPLICATE_CONTACT_MESSAGE
                ) from e
            raise

        contact = row_to_contact(row)
        log_event("contact_added", f"Contact {contact_user_id} added", contact_id=contact.id)
        self.session.notify("Contact added successfully", "success")
        await self.fetch()
        return contact
