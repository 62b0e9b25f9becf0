"""Routes CLI commands to feature services."""

import json
from typing import Any, Awaitable, Callable, Dict, Optional

from rich.console import Console

from papyrus.core.models import FeedKind, FilterSpec, Letter
from papyrus.core.validation import Timestamps
from papyrus.features.feed import ContactService, LetterOperations, create_feed
from papyrus.ui.components import ContactTable, LetterPanel, LetterTable
from papyrus.utils.config_manager import ConfigManager
from papyrus.utils.console import get_console, print_error, print_success, print_warning
from papyrus.utils.errors import PapyrusError, ValidationError, format_error_message
from papyrus.utils.logging import async_log_call, get_logger

from .lifecycle import Workspace

logger = get_logger(__name__)

WorkspaceFactory = Callable[[], Workspace]


def build_filters(args: Dict[str, Any]) -> FilterSpec:
    """Build a FilterSpec from parsed filter arguments.

    Raises:
        ValidationError: If a date cannot be parsed
    """
    before = args.get("before")
    after = args.get("after")
    return FilterSpec.create(
        contact_ids=args.get("contacts") or (),
        before_date=Timestamps.parse_user_date(before) if before else None,
        after_date=Timestamps.parse_user_date(after) if after else None,
    )


class CommandRouter:
    """Routes commands to the feed, contact and letter services."""

    def __init__(
        self,
        workspace_factory: WorkspaceFactory,
        config: ConfigManager,
        console: Optional[Console] = None,
    ):
        self.workspace_factory = workspace_factory
        self.config = config
        self.console = console or get_console()

    @async_log_call
    async def route(self, command: str, args: Optional[Dict[str, Any]] = None) -> bool:
        """Route command to its handler.

        Args:
            command: Command name
            args: Parsed arguments dictionary

        Returns:
            True if command executed successfully

        Raises:
            ValueError: If command is unknown
        """
        if args is None:
            args = {}

        handler = self._get_handler(command, args)
        if not handler:
            raise ValueError(f"Unknown command: {command}")

        try:
            return await handler(args)
        except PapyrusError as e:
            logger.error(f"Command '{command}' failed: {e.message}")
            print_error(format_error_message(e), self.console)
            return False

    def _get_handler(
        self, command: str, args: Dict[str, Any]
    ) -> Optional[Callable[[Dict[str, Any]], Awaitable[bool]]]:
        handlers = {
            "inbox": self._handle_inbox,
            "sent": self._handle_sent,
            "read": self._handle_read,
            "write": self._handle_write,
            "edit": self._handle_edit,
            "delete": self._handle_delete,
            "contacts": self._handle_contacts,
            "view": self._handle_view,
        }
        if command in handlers:
            return handlers[command]

        if command == "config":
            return self._get_config_handler(args)

        return None

    def _get_config_handler(self, args: Dict[str, Any]):
        config_handlers = {
            "list": self._handle_config_list,
            "get": self._handle_config_get,
            "set": self._handle_config_set,
            "reset": self._handle_config_reset,
        }
        return config_handlers.get(args.get("config_command"))

    def _feed_kwargs(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "filters": build_filters(args),
            "retry": self.config.config.retry,
        }

    ## Feed viewing commands

    async def _show_feed(self, kind: FeedKind, args: Dict[str, Any]) -> bool:
        kwargs = self._feed_kwargs(args)
        async with self.workspace_factory() as workspace:
            contacts = ContactService(workspace.session, workspace.backend, retry=kwargs["retry"])
            await contacts.fetch()

            feed = create_feed(
                kind,
                workspace.session,
                workspace.backend,
                contact_labels=contacts.labels(),
                **kwargs,
            )
            await feed.fetch()

        if feed.error:
            print_error(feed.error, self.console)
            return False

        LetterTable(self.console).display(feed.letters, feed=kind)
        return True

    async def _handle_inbox(self, args: Dict[str, Any]) -> bool:
        return await self._show_feed(FeedKind.INBOX, args)

    async def _handle_sent(self, args: Dict[str, Any]) -> bool:
        return await self._show_feed(FeedKind.SENT, args)

    ## Letter commands

    @staticmethod
    def _find_letter(letters, letter_id: str) -> Optional[Letter]:
        """Find a letter by full id or unique id prefix."""
        matches = [letter for letter in letters if letter.id.startswith(letter_id)]
        exact = [letter for letter in matches if letter.id == letter_id]
        if exact:
            return exact[0]
        if len(matches) > 1:
            raise ValidationError(
                f"Ambiguous letter id prefix: {letter_id}",
                user_message="That ID matches more than one letter. Please use more characters.",
            )
        return matches[0] if matches else None

    async def _handle_read(self, args: Dict[str, Any]) -> bool:
        async with self.workspace_factory() as workspace:
            feed = create_feed(
                FeedKind.INBOX,
                workspace.session,
                workspace.backend,
                retry=self.config.config.retry,
            )
            await feed.fetch()
            if feed.error:
                print_error(feed.error, self.console)
                return False

            letter = self._find_letter(feed.letters, args["id"])
            if letter is None:
                letter = self._find_letter(await feed.lookup(args["id"]), args["id"])
            if letter is None:
                print_warning("Letter not found in your inbox", self.console)
                return False

            LetterPanel(self.console).display(letter)
            if not letter.is_read:
                await feed.mark_as_read(letter.id)
                print_success("Marked as read", self.console)

        return True

    async def _handle_write(self, args: Dict[str, Any]) -> bool:
        async with self.workspace_factory() as workspace:
            operations = LetterOperations(workspace.session, workspace.backend)
            letter = await operations.send_letter(args["recipient"], args["content"])

        print_success(f"Letter {letter.id[:8]} sent", self.console)
        return True

    async def _handle_edit(self, args: Dict[str, Any]) -> bool:
        async with self.workspace_factory() as workspace:
            operations = LetterOperations(workspace.session, workspace.backend)
            await operations.update_letter(args["id"], args["content"])

        print_success("Letter updated", self.console)
        return True

    async def _handle_delete(self, args: Dict[str, Any]) -> bool:
        async with self.workspace_factory() as workspace:
            operations = LetterOperations(workspace.session, workspace.backend)
            await operations.delete_letter(args["id"])

        print_success("Letter deleted", self.console)
        return True

    ## Contacts

    async def _handle_contacts(self, args: Dict[str, Any]) -> bool:
        async with self.workspace_factory() as workspace:
            service = ContactService(
                workspace.session, workspace.backend, retry=self.config.config.retry
            )
            if args.get("add"):
                await service.add(args["add"], args.get("name") or args["add"])
            else:
                await service.fetch()

        if service.error:
            print_error(service.error, self.console)
            return False

        ContactTable(self.console).display(service.contacts)
        return True

    ## Reader

    async def _handle_view(self, args: Dict[str, Any]) -> bool:
        # Imported here so plain CLI commands do not pay for Textual
        from papyrus.tui.reader import LetterReaderApp

        kwargs = self._feed_kwargs(args)
        async with self.workspace_factory() as workspace:
            contacts = ContactService(workspace.session, workspace.backend, retry=kwargs["retry"])
            await contacts.fetch()

            feed = create_feed(
                FeedKind.from_string(args.get("feed", "inbox")),
                workspace.session,
                workspace.backend,
                contact_labels=contacts.labels(),
                **kwargs,
            )
            app = LetterReaderApp(feed, navigation=self.config.config.navigation)
            await app.run_async()

        return True

    ## Config

    async def _handle_config_list(self, args: Dict[str, Any]) -> bool:
        self.console.print_json(json.dumps(self.config.config.model_dump()))
        return True

    async def _handle_config_get(self, args: Dict[str, Any]) -> bool:
        value = self.config.get(args["key"])
        if value is None:
            print_warning(f"No value set for '{args['key']}'", self.console)
            return False
        if hasattr(value, "model_dump"):
            self.console.print_json(json.dumps(value.model_dump()))
        else:
            self.console.print(str(value))
        return True

    async def _handle_config_set(self, args: Dict[str, Any]) -> bool:
        self.config.set(args["key"], args["value"])
        print_success(f"{args['key']} updated", self.console)
        return True

    async def _handle_config_reset(self, args: Dict[str, Any]) -> bool:
        self.config.reset()
        print_success("Configuration reset to defaults", self.console)
        return True
