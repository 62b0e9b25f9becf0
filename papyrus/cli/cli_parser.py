"""Argument parser configuration for Papyrus CLI"""

import argparse


## Argument Adding Utilities

def add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    """Add contact and date filter arguments to the parser."""

    filter_group = parser.add_argument_group("filters", "Filter displayed letters")

    filter_group.add_argument(
        "--contact",
        action="append",
        dest="contacts",
        metavar="USER_ID",
        help="Only letters exchanged with this user (repeatable)"
    )
    filter_group.add_argument(
        "--before",
        metavar="DATE",
        help="Only letters written before DATE (YYYY-MM-DD or ISO timestamp)"
    )
    filter_group.add_argument(
        "--after",
        metavar="DATE",
        help="Only letters written after DATE (YYYY-MM-DD or ISO timestamp)"
    )


## Command Setup Functions

def setup_feed_commands(subparsers) -> None:
    """Setup inbox and sent viewing commands with filters."""

    inbox_parser = subparsers.add_parser(
        "inbox",
        help="View letters addressed to you",
        description="Display unread letters oldest first, or read letters newest first when nothing is unread"
    )
    add_filter_arguments(inbox_parser)

    sent_parser = subparsers.add_parser(
        "sent",
        help="View letters you have written",
        description="Display sent letters newest first"
    )
    add_filter_arguments(sent_parser)

    view_parser = subparsers.add_parser(
        "view",
        help="Open the letter reader",
        description="Page through a feed one letter at a time"
    )
    view_parser.add_argument(
        "--feed",
        default="inbox",
        choices=["inbox", "sent"],
        help="Feed to open (default: inbox)"
    )
    add_filter_arguments(view_parser)

def setup_letter_commands(subparsers) -> None:
    """Setup read, write, edit and delete commands."""

    read_parser = subparsers.add_parser(
        "read",
        help="Read a letter and mark it as read",
    )
    read_parser.add_argument("id", help="Letter ID (a unique prefix is enough)")

    write_parser = subparsers.add_parser(
        "write",
        help="Write a letter",
    )
    write_parser.add_argument("recipient", help="Recipient user ID")
    write_parser.add_argument("content", help="Letter text")

    edit_parser = subparsers.add_parser(
        "edit",
        help="Change a letter that has not been read yet",
    )
    edit_parser.add_argument("id", help="Letter ID")
    edit_parser.add_argument("content", help="New letter text")

    delete_parser = subparsers.add_parser(
        "delete",
        help="Withdraw a letter that has not been read yet",
    )
    delete_parser.add_argument("id", help="Letter ID")

def setup_contact_commands(subparsers) -> None:
    """Setup contact list commands."""

    contacts_parser = subparsers.add_parser(
        "contacts",
        help="List or add contacts",
    )
    contacts_parser.add_argument(
        "--add",
        metavar="USER_ID",
        help="Add the user with this ID to your contacts"
    )
    contacts_parser.add_argument(
        "--name",
        help="Display name for the added contact"
    )

def setup_config_commands(subparsers) -> None:
    """Setup configuration management commands."""

    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )

    config_subparsers = config_parser.add_subparsers(
        dest="config_command",
        required=True,
        help="Configuration operation"
    )

    config_subparsers.add_parser("list", help="Show all settings")

    get_parser = config_subparsers.add_parser("get", help="Show one setting")
    get_parser.add_argument("key", help="Dotted key, e.g. retry.max_attempts")

    set_parser = config_subparsers.add_parser("set", help="Change one setting")
    set_parser.add_argument("key", help="Dotted key, e.g. account.user_id")
    set_parser.add_argument("value", help="New value")

    config_subparsers.add_parser("reset", help="Restore default settings")


def setup_argument_parser() -> argparse.ArgumentParser:
    """Setup the main argument parser for the Papyrus CLI."""

    parser = argparse.ArgumentParser(
        prog="papyrus",
        description="Slow correspondence - read, write and page through letters",
        epilog="Use 'papyrus <command> --help' for command-specific help."
    )

    parser.add_argument(
        "--version",
        action="version",
        version="Papyrus 0.1.0",
    )
    parser.add_argument(
        "--db",
        metavar="PATH",
        help="Letter database (default: storage.database_path setting)"
    )
    parser.add_argument(
        "--user",
        metavar="USER_ID",
        help="Act as this user (default: account.user_id setting)"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        help="Command to execute"
    )

    setup_feed_commands(subparsers)
    setup_letter_commands(subparsers)
    setup_contact_commands(subparsers)
    setup_config_commands(subparsers)

    return parser
