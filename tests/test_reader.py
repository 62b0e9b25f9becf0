"""Tests for the full-screen letter reader."""

import pytest

from factories import letter_row
from papyrus.features.feed import InboxFeedService
from papyrus.tui.reader import LetterReaderApp
from papyrus.utils.errors import ForbiddenError


@pytest.fixture
def feed(session, mock_backend, retry_config, fake_sleep):
    mock_backend.select.return_value = [
        letter_row("l1", minutes=1),
        letter_row("l2", minutes=2),
        letter_row("l3", minutes=3),
    ]
    return InboxFeedService(session, mock_backend, retry=retry_config, sleep=fake_sleep)


@pytest.mark.asyncio
async def test_arrow_keys_page_through_letters(feed):
    app = LetterReaderApp(feed)

    async with app.run_test() as pilot:
        await pilot.pause()
        assert app.controller.length == 3

        await pilot.press("right", "right", "right")
        assert app.controller.current.id == "l3"

        await pilot.press("left")
        assert app.controller.current_index == 1
        assert app.controller.direction == -1


@pytest.mark.asyncio
async def test_mark_read_refetches_and_clamps(feed, mock_backend):
    app = LetterReaderApp(feed)

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("right", "right")

        mock_backend.update.return_value = letter_row("l3", is_read=True)
        mock_backend.select.return_value = [
            letter_row("l1", minutes=1),
            letter_row("l2", minutes=2),
        ]
        await pilot.press("m")
        await pilot.pause()

        assert app.controller.length == 2
        assert app.controller.current_index == 1


@pytest.mark.asyncio
async def test_failed_mark_read_rolls_back(feed, mock_backend):
    app = LetterReaderApp(feed)

    async with app.run_test() as pilot:
        await pilot.pause()
        mock_backend.update.side_effect = ForbiddenError("forbidden")

        await pilot.press("m")
        await pilot.pause()

        assert not app.controller.current.is_read
        assert feed.error == ForbiddenError.user_message
