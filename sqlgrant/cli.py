#!/usr/bin/env python3
"""sqlgrant - Provision least-privilege MySQL users for an instance."""

from __future__ import annotations

import argparse
import sys

from .shared.core.logs import configure_logging


def _add_instance_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dir",
        "-d",
        metavar="PATH",
        help="Instance directory holding config.<environment>.json (default: $SQLGRANT_DIR or cwd)",
    )
    parser.add_argument(
        "--environment",
        "-e",
        help="Config environment (default: $SQLGRANT_ENVIRONMENT or production)",
    )


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlgrant",
        description="Create a least-privilege MySQL user and store its credentials",
        epilog="Example: sqlgrant config --db-user root --prompt-password && sqlgrant setup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--verbose",
        "-V",
        action="store_true",
        help="Log every statement and retry.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    setup_parser = subparsers.add_parser(
        "setup",
        help="Create the MySQL user and save its credentials",
    )
    _add_instance_arguments(setup_parser)
    setup_parser.add_argument(
        "--local",
        action="store_true",
        help="Local install (skips MySQL user setup)",
    )
    setup_parser.add_argument(
        "--db",
        choices=["mysql", "sqlite3"],
        help="Database engine (sqlite3 skips MySQL user setup)",
    )
    setup_parser.add_argument(
        "--max-attempts",
        type=_positive_int,
        default=None,
        metavar="COUNT",
        help="Give up after COUNT username collisions (default: unlimited)",
    )

    config_parser = subparsers.add_parser("config", help="Read or update the instance config")
    _add_instance_arguments(config_parser)
    config_parser.add_argument("key", nargs="?", help="Dotted key, e.g. database.connection.host")
    config_parser.add_argument("value", nargs="?", help="New value (omit to print the current one)")
    config_parser.add_argument("--db-host", help="MySQL host")
    config_parser.add_argument("--db-port", help="MySQL port")
    config_parser.add_argument("--db-user", help="MySQL user")
    config_parser.add_argument("--db-password", help="MySQL password")
    config_parser.add_argument("--db-name", help="MySQL database name")
    config_parser.add_argument(
        "--prompt-password",
        action="store_true",
        help="Prompt for the MySQL password instead of passing it on the command line",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(verbose=args.verbose)

    if args.command == "setup":
        from .domains.provisioning.cli.commands import cmd_setup

        return cmd_setup(args)

    if args.command == "config":
        from .domains.config.cli.commands import cmd_config

        return cmd_config(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
