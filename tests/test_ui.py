"""Tests for rich display components."""

from rich.console import Console

from factories import at
from papyrus.core.models import Contact, FeedKind, Letter, UserSummary
from papyrus.ui.components import ContactTable, LetterPanel, LetterTable


def recording_console():
    return Console(record=True, width=140, color_system=None)


def make_letter(letter_id="abcdef123456", **overrides):
    fields = dict(
        id=letter_id,
        author_id="bob",
        recipient_id="alice",
        content="Greetings from the coast",
        created_at=at(0),
        updated_at=at(0),
        author=UserSummary("bob", "Uncle Bob"),
        recipient=UserSummary("alice", "Alice", last_login_at=at(30)),
    )
    fields.update(overrides)
    return Letter(**fields)


class TestLetterTable:
    def test_inbox_columns(self):
        console = recording_console()

        LetterTable(console).display([make_letter()], feed=FeedKind.INBOX)

        output = console.export_text()
        assert "Inbox" in output
        assert "From" in output
        assert "Uncle Bob" in output
        assert "abcdef12" in output
        assert "Greetings from the coast" in output
        assert "●" in output

    def test_sent_shows_recipient_last_seen(self):
        console = recording_console()
        letters = [
            make_letter(is_read=True),
            make_letter("zz", recipient=UserSummary("carol", "Carol")),
        ]

        LetterTable(console).display(letters, feed=FeedKind.SENT)

        output = console.export_text()
        assert "Last seen" in output
        assert "Alice" in output
        assert "never" in output

    def test_empty(self):
        console = recording_console()

        LetterTable(console).display([])

        assert "No letters to display" in console.export_text()


def test_contact_table():
    console = recording_console()
    contact = Contact("c1", "alice", "bob", "Uncle Bob", at(0))

    ContactTable(console).display([contact])

    output = console.export_text()
    assert "Uncle Bob" in output
    assert "bob" in output


def test_letter_panel():
    console = recording_console()

    LetterPanel(console).display(make_letter(read_at=at(10), is_read=True))

    output = console.export_text()
    assert "From: Uncle Bob" in output
    assert "To: Alice" in output
    assert "Read:" in output
    assert "Greetings from the coast" in output
