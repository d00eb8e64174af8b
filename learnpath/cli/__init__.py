#!/usr/bin/env python3
"""
LearnPath operator CLI

Usage:
    python -m learnpath.cli <command> [options]
    learnpath <command> [options]

Commands:
    db          Database operations (init, verify)
    user        Account operations (create, set-role, list)
    config      Configuration (show, check)

Environment:
    DATABASE_URL    Async SQLAlchemy URL (default: local SQLite file)
    LOG_LEVEL       DEBUG|INFO|WARNING|ERROR
"""
import sys
import argparse
import logging
from typing import Optional

from learnpath import __version__
from learnpath.cli.db_commands import DbCommand
from learnpath.cli.user_commands import UserCommand
from learnpath.cli.config_commands import ConfigCommand

ROLE_CHOICES = ["STUDENT", "TEACHER", "ADMIN"]


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="learnpath",
        description="LearnPath operator CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s db init
  %(prog)s user create --email admin@example.com --name Admin --password secret1 --role ADMIN
  %(prog)s user set-role --email teacher@example.com --role TEACHER
  %(prog)s config show
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without executing"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Database commands
    db_parser = subparsers.add_parser("db", help="Database operations")
    db_subparsers = db_parser.add_subparsers(dest="db_action")
    db_subparsers.add_parser("init", help="Create all tables")
    db_subparsers.add_parser("verify", help="Check that every table exists")

    # User commands
    user_parser = subparsers.add_parser("user", help="Account operations")
    user_subparsers = user_parser.add_subparsers(dest="user_action")

    user_create_parser = user_subparsers.add_parser("create", help="Create an account")
    user_create_parser.add_argument("--email", required=True)
    user_create_parser.add_argument("--name", required=True)
    user_create_parser.add_argument("--password", required=True)
    user_create_parser.add_argument("--role", choices=ROLE_CHOICES, default="STUDENT")

    role_parser = user_subparsers.add_parser("set-role", help="Change an account's role")
    role_parser.add_argument("--email", required=True)
    role_parser.add_argument("--role", choices=ROLE_CHOICES, required=True)

    user_subparsers.add_parser("list", help="List accounts")

    # Config commands
    config_parser = subparsers.add_parser("config", help="Configuration")
    config_subparsers = config_parser.add_subparsers(dest="config_action")
    config_subparsers.add_parser("show", help="Print effective settings, secrets masked")
    config_subparsers.add_parser("check", help="Validate configuration for the current environment")

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 1

    setup_logging(parsed.log_level)

    command_map = {
        "db": DbCommand,
        "user": UserCommand,
        "config": ConfigCommand,
    }

    if parsed.command in command_map:
        handler = command_map[parsed.command](dry_run=parsed.dry_run)
        return handler.execute(parsed)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
