from typing import Optional

from rich.console import Console
from rich.panel import Panel

from papyrus.core.models import Letter
from papyrus.utils.console import get_console

from .tables import format_timestamp


class LetterPanel:
    """Display a single letter in panels.

    Used by: read.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_console()

    def display(self, letter: Letter) -> None:
        """Display letter with header and body panels."""
        self.console.print(Panel(
            self._format_header(letter),
            title=f"[bold]Letter {letter.id[:8]}[/bold]",
            border_style="cyan",
            padding=(1, 2)
        ))

        body = letter.content
        if not body or not body.strip():
            body = "[italic dim]No content[/italic dim]"

        self.console.print(Panel(
            body,
            border_style="cyan dim",
            padding=(1, 2)
        ))

    def _format_header(self, letter: Letter) -> str:
        """Format letter header as markup string."""
        author = letter.author.label if letter.author else letter.author_id
        recipient = letter.recipient.label if letter.recipient else letter.recipient_id
        lines = [
            f"[bold]From:[/bold] {author}",
            f"[bold]To:[/bold] {recipient}",
            f"[bold]Written:[/bold] {format_timestamp(letter.created_at)}",
        ]
        if letter.read_at is not None:
            lines.append(f"[bold]Read:[/bold] {format_timestamp(letter.read_at)}")
        return "\n".join(lines)
