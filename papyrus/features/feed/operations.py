"""Edit and delete operations on letters the current user wrote."""

from sqlalchemy import and_

from papyrus.core.database import SERVER_NOW, LetterBackend, letters
from papyrus.core.database.utils import row_to_letter
from papyrus.core.models import Letter
from papyrus.core.session import Session
from papyrus.utils.errors import (
    LetterNotFoundError,
    NotAuthenticatedError,
    ValidationError,
)
from papyrus.utils.logging import async_log_call, get_logger, log_event

logger = get_logger(__name__)


class LetterOperations:
    """Author-side changes to letters.

    A letter can only be edited or withdrawn by its author, and only while
    the recipient has not read it yet.
    """

    def __init__(self, session: Session, backend: LetterBackend):
        self.session = session
        self.backend = backend

    async def _author_id(self) -> str:
        identity = await self.backend.current_identity()
        if identity is None:
            raise NotAuthenticatedError("User not authenticated")
        return identity.id

    @staticmethod
    def _editable(letter_id: str, author_id: str):
        return and_(
            letters.c.id == letter_id,
            letters.c.author_id == author_id,
            letters.c.is_read == False,  # noqa: E712
        )

    @async_log_call
    async def send_letter(self, recipient_id: str, content: str) -> Letter:
        """Write a new letter to another user.

        Raises:
            ValidationError: If the content or recipient is missing
        """
        content = (content or "").strip()
        if not content:
            raise ValidationError(
                "Letter content is empty", user_message="Letter content is required"
            )
        if not recipient_id:
            raise ValidationError(
                "Recipient is missing", user_message="Please select a recipient"
            )

        author_id = await self._author_id()
        row = await self.backend.insert(
            letters,
            {
                "author_id": author_id,
                "recipient_id": recipient_id,
                "content": content,
                "is_read": False,
                "created_at": SERVER_NOW,
                "updated_at": SERVER_NOW,
            },
        )

        log_event("letter_sent", f"Letter sent to {recipient_id}", letter_id=row["id"])
        self.session.notify("Letter sent successfully!", "success")
        return row_to_letter(row)

    @async_log_call
    async def update_letter(self, letter_id: str, content: str) -> Letter:
        """Replace the content of an unread letter.

        Raises:
            ValidationError: If the new content is empty
            LetterNotFoundError: If no editable letter matched
        """
        if not content or not content.strip():
            raise ValidationError(
                "Letter content is empty", user_message="Letter content cannot be empty."
            )

        author_id = await self._author_id()
        row = await self.backend.update(
            letters,
            self._editable(letter_id, author_id),
            {"content": content.strip(), "updated_at": SERVER_NOW},
        )
        if row is None:
            raise LetterNotFoundError(
                "Letter not found or cannot be updated",
                details={"letter_id": letter_id},
                user_message="Letter not found or cannot be updated. It may have already been read.",
            )

        log_event("letter_updated", f"Letter {letter_id} updated", letter_id=letter_id)
        self.session.notify("Letter updated successfully", "success")
        return row_to_letter(row)

    @async_log_call
    async def delete_letter(self, letter_id: str) -> str:
        """Withdraw an unread letter.

        Returns:
            The id of the deleted letter

        Raises:
            LetterNotFoundError: If no deletable letter matched
        """
        author_id = await self._author_id()
        deleted = await self.backend.delete(letters, self._editable(letter_id, author_id))
        if deleted == 0:
            raise LetterNotFoundError(
                "Letter not found or cannot be deleted",
                details={"letter_id": letter_id},
                user_message="Letter not found or cannot be deleted. It may have already been read.",
            )

        log_event("letter_deleted", f"Letter {letter_id} deleted", letter_id=letter_id)
        self.session.notify("Letter deleted successfully", "success")
        return letter_id
