"""Tests for author-side letter operations."""

import pytest

from factories import seed_letter
from papyrus.core.database import LetterQueryBuilder, letters
from papyrus.features.feed import LetterOperations
from papyrus.utils.errors import (
    LetterNotFoundError,
    NotAuthenticatedError,
    ValidationError,
)


@pytest.fixture
def operations(session, sql_backend):
    return LetterOperations(session, sql_backend)


async def fetch_row(backend, letter_id):
    rows = await backend.select(LetterQueryBuilder.letter_by_id(letter_id))
    return rows[0] if rows else None


class TestSendLetter:
    @pytest.mark.asyncio
    async def test_send_creates_unread_letter(self, operations, sql_backend, notifier):
        letter = await operations.send_letter("bob", "  Dear Bob  ")

        row = await fetch_row(sql_backend, letter.id)
        assert row["author_id"] == "alice"
        assert row["recipient_id"] == "bob"
        assert row["content"] == "Dear Bob"
        assert row["is_read"] is False
        notifier.assert_called_once_with("Letter sent successfully!", "success")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("recipient,content", [("bob", "   "), ("", "Hello")])
    async def test_send_requires_content_and_recipient(self, operations, recipient, content):
        with pytest.raises(ValidationError):
            await operations.send_letter(recipient, content)

    @pytest.mark.asyncio
    async def test_send_requires_identity(self, operations, session):
        session.close()

        with pytest.raises(NotAuthenticatedError):
            await operations.send_letter("bob", "Hello")


class TestUpdateLetter:
    @pytest.mark.asyncio
    async def test_update_unread_letter(self, operations, sql_backend):
        await seed_letter(sql_backend, "l1", author_id="alice", recipient_id="bob")

        letter = await operations.update_letter("l1", "Second draft")

        assert letter.content == "Second draft"
        assert (await fetch_row(sql_backend, "l1"))["content"] == "Second draft"

    @pytest.mark.asyncio
    async def test_read_letter_cannot_be_updated(self, operations, sql_backend):
        await seed_letter(
            sql_backend, "l1", author_id="alice", recipient_id="bob", is_read=True
        )

        with pytest.raises(LetterNotFoundError) as exc_info:
            await operations.update_letter("l1", "Too late")

        assert "already been read" in exc_info.value.user_message

    @pytest.mark.asyncio
    async def test_other_authors_letters_cannot_be_updated(self, operations, sql_backend):
        await seed_letter(sql_backend, "l1", author_id="bob", recipient_id="alice")

        with pytest.raises(LetterNotFoundError):
            await operations.update_letter("l1", "Forged")

        assert (await fetch_row(sql_backend, "l1"))["content"] == "Letter l1"

    @pytest.mark.asyncio
    async def test_empty_content_is_rejected(self, operations):
        with pytest.raises(ValidationError):
            await operations.update_letter("l1", "")


class TestDeleteLetter:
    @pytest.mark.asyncio
    async def test_delete_unread_letter(self, operations, sql_backend):
        await seed_letter(sql_backend, "l1", author_id="alice", recipient_id="bob")

        assert await operations.delete_letter("l1") == "l1"
        assert await fetch_row(sql_backend, "l1") is None

    @pytest.mark.asyncio
    async def test_read_letter_cannot_be_deleted(self, operations, sql_backend):
        await seed_letter(
            sql_backend, "l1", author_id="alice", recipient_id="bob", is_read=True
        )

        with pytest.raises(LetterNotFoundError):
            await operations.delete_letter("l1")

        assert await fetch_row(sql_backend, "l1") is not None

    @pytest.mark.asyncio
    async def test_missing_letter(self, operations, sql_backend):
        with pytest.raises(LetterNotFoundError):
            await operations.delete_letter("nope")

        assert await sql_backend.delete(letters, letters.c.id == "nope") == 0
