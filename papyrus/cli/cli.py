"""Main CLI entry point."""

import asyncio
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console

from papyrus.utils.config_manager import ConfigManager
from papyrus.utils.console import get_console
from papyrus.utils.errors import PapyrusError, format_error_message
from papyrus.utils.logging import async_log_call, get_logger, init_logging

from .cli_parser import setup_argument_parser
from .lifecycle import Workspace
from .router import CommandRouter

logger = get_logger(__name__)


def _args_to_dict(args) -> Dict[str, Any]:
    """Convert argparse Namespace to dictionary."""
    result = {}
    for key, value in vars(args).items():
        if key != "command" and value is not None:
            result[key] = value
    return result


def _toast(console: Console):
    styles = {"error": "red", "success": "green", "warning": "yellow"}

    def notify(message: str, level: str) -> None:
        console.print(f"[{styles.get(level, 'cyan')}]{message}[/]")

    return notify


@async_log_call
async def dispatch_command(args, config: ConfigManager, console: Console) -> int:
    """Dispatch command via router.

    Args:
        args: Parsed arguments
        config: Loaded configuration
        console: Rich console

    Returns:
        Exit code (0 = success, 1 = error)
    """
    db_path = Path(args.db or config.get("storage.database_path")).expanduser()
    user_id = args.user or config.get("account.user_id")
    email = config.get("account.email") if user_id == config.get("account.user_id") else None

    def open_workspace() -> Workspace:
        return Workspace(db_path, user_id=user_id, email=email, notifier=_toast(console))

    try:
        router = CommandRouter(open_workspace, config, console)
        success = await router.route(args.command, _args_to_dict(args))
        return 0 if success else 1

    except ValueError as e:
        logger.error(f"Invalid command: {e}")
        console.print(f"[red]Error: {e}[/red]")
        return 1


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code
    """
    console = get_console()

    try:
        parser = setup_argument_parser()
        args = parser.parse_args(argv)

        try:
            config = ConfigManager()
        except PapyrusError as e:
            logger.error(f"Configuration error: {e.message}")
            console.print(f"[red]Configuration error: {format_error_message(e)}[/red]")
            return 1

        log_manager = init_logging()
        try:
            log_manager.set_level(config.get("logging.log_level", "INFO"))
            log_manager.set_console_level(config.get("logging.console_level", "WARNING"))
        except ValueError as e:
            console.print(f"[red]Configuration error: {e}[/red]")
            return 1

        return asyncio.run(dispatch_command(args, config, console))

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130  # Standard SIGINT exit code

    except PapyrusError as e:
        logger.error(f"Fatal error: {e.message}")
        console.print(f"[red]{format_error_message(e)}[/red]")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
