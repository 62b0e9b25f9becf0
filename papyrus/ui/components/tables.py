"""Letter and contact table display components."""

from datetime import datetime
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from papyrus.core.models import Contact, FeedKind, Letter
from papyrus.utils.console import get_console


def format_timestamp(value: Optional[datetime]) -> str:
    """Format a timestamp in local time for display."""
    if value is None:
        return ""
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


class LetterTable:
    """Reusable letter table component.

    Used by: inbox, sent.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_console()

    def display(
        self,
        letters: Sequence[Letter],
        feed: FeedKind = FeedKind.INBOX,
        title: Optional[str] = None,
    ) -> None:
        """Display letters as a formatted table.

        Args:
            letters: Letters in feed order
            feed: Which feed the letters belong to
            title: Table title (defaults to the feed name)
        """
        if not letters:
            self.console.print("[yellow]No letters to display[/yellow]")
            return

        table = self.build(letters, feed, title)
        self.console.print(table)

    def build(
        self,
        letters: Sequence[Letter],
        feed: FeedKind = FeedKind.INBOX,
        title: Optional[str] = None,
    ) -> Table:
        table = Table(title=title or feed.value.title())

        table.add_column("#", style="cyan", justify="right", no_wrap=True)
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("From" if feed is FeedKind.INBOX else "To", style="magenta", min_width=16)
        table.add_column("Preview", style="green", min_width=20)
        table.add_column("Date", style="yellow", justify="right")
        table.add_column("", style="blue", width=3, justify="center")
        if feed is FeedKind.SENT:
            table.add_column("Last seen", style="white", justify="right")

        for position, letter in enumerate(letters, start=1):
            table.add_row(*self._build_row(position, letter, feed))

        return table

    def _build_row(self, position: int, letter: Letter, feed: FeedKind) -> list[str]:
        """Build table row from a letter."""
        if feed is FeedKind.INBOX:
            other = letter.author.label if letter.author else letter.author_id
        else:
            other = letter.recipient.label if letter.recipient else letter.recipient_id

        row = [
            str(position),
            letter.id[:8],
            self._truncate(other, 25),
            letter.get_preview(40),
            format_timestamp(letter.created_at),
            "●" if not letter.is_read else "",
        ]

        if feed is FeedKind.SENT:
            last_login = letter.recipient.last_login_at if letter.recipient else None
            row.append(format_timestamp(last_login) or "never")

        return row

    @staticmethod
    def _truncate(text: str, max_length: int) -> str:
        """Truncate text with ellipsis."""
        if len(text) <= max_length:
            return text
        return text[: max_length - 3] + "..."


class ContactTable:
    """Contact list table."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_console()

    def display(self, contacts: Sequence[Contact], title: str = "Contacts") -> None:
        if not contacts:
            self.console.print("[yellow]No contacts yet[/yellow]")
            return

        table = Table(title=title)
        table.add_column("Name", style="magenta", min_width=16)
        table.add_column("User ID", style="cyan")
        table.add_column("Added", style="yellow", justify="right")

        for contact in contacts:
            table.add_row(
                contact.display_name,
                contact.contact_user_id,
                format_timestamp(contact.created_at),
            )

        self.console.print(table)
