"""Full-screen letter reader."""

from typing import Optional

from rich.markup import escape
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static

from papyrus.core.models import FeedKind, Letter
from papyrus.features.feed import LetterFeedService
from papyrus.features.navigation import NavigationController
from papyrus.ui.components import format_timestamp
from papyrus.utils.config_manager import NavigationConfig
from papyrus.utils.errors import PapyrusError
from papyrus.utils.logging import get_logger

logger = get_logger(__name__)

_SEVERITIES = {"error": "error", "warning": "warning"}


class LetterView(Static):
    """Displays one letter at a time."""

    def show_letter(self, letter: Optional[Letter], kind: FeedKind) -> None:
        if letter is None:
            self.update("[dim]No letters.[/dim]")
            return

        if kind is FeedKind.INBOX:
            party = f"[b]From:[/b] {escape(letter.author.label if letter.author else letter.author_id)}"
        else:
            party = f"[b]To:[/b] {escape(letter.recipient.label if letter.recipient else letter.recipient_id)}"
            if letter.recipient and letter.recipient.last_login_at:
                party += f"  [dim](last seen {format_timestamp(letter.recipient.last_login_at)})[/dim]"

        state = "[green]read[/green]" if letter.is_read else "[yellow]unread[/yellow]"
        header = (
            f"{party}\n"
            f"[b]Written:[/b] {format_timestamp(letter.created_at)}  {state}\n\n"
        )
        self.update(header + escape(letter.content))


class LetterReaderApp(App):
    TITLE = "Papyrus"
    CSS = """
    #status {
        height: 1;
        padding: 0 1;
        background: $boost;
    }
    #letter {
        height: 1fr;
        padding: 1 2;
    }
    """

    BINDINGS = [
        Binding("left", "previous", "Previous", priority=True),
        Binding("right", "next", "Next", priority=True),
        Binding("m", "mark_read", "Mark Read"),
        Binding("r", "reload", "Refresh"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        feed: LetterFeedService,
        navigation: Optional[NavigationConfig] = None,
    ):
        super().__init__()
        self.feed = feed
        self.controller: NavigationController[Letter] = NavigationController(
            on_navigate=self._on_navigate, config=navigation
        )
        self.feed.session.set_notifier(self._toast)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="status")
        yield LetterView(id="letter")
        yield Footer()

    # --- Event Handlers ---
    async def on_mount(self) -> None:
        self.sub_title = self.feed.kind.value.title()
        await self.action_reload()

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self.controller.handle_wheel(self.controller.config.wheel_step)

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self.controller.handle_wheel(-self.controller.config.wheel_step)

    def _on_navigate(self, index: int) -> None:
        self._show_current()

    def _toast(self, message: str, level: str) -> None:
        self.notify(message, severity=_SEVERITIES.get(level, "information"))

    def _show_current(self) -> None:
        status = self.query_one("#status", Static)
        if self.controller.length:
            text = f"{self.controller.current_index + 1} / {self.controller.length}"
        else:
            text = "0 / 0"
        if self.feed.error:
            text += f"  [red]{escape(self.feed.error)}[/red]"
        status.update(text)

        self.query_one("#letter", LetterView).show_letter(
            self.controller.current, self.feed.kind
        )

    # --- Actions ---
    def action_next(self) -> None:
        self.controller.handle_key("right")

    def action_previous(self) -> None:
        self.controller.handle_key("left")

    async def action_reload(self) -> None:
        letters = await self.feed.fetch()
        self.controller.update_items(letters)
        self._show_current()

    async def action_mark_read(self) -> None:
        letter = self.controller.current
        if letter is None or self.feed.kind is not FeedKind.INBOX or letter.is_read:
            return

        try:
            await self.feed.mark_as_read(letter.id)
        except PapyrusError as e:
            # Already rolled back and reported through the session notifier
            logger.debug(f"Mark as read failed in reader: {e.message}")

        self.controller.update_items(self.feed.letters)
        self._show_current()
