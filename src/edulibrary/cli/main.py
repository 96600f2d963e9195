from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console

from edulibrary.cli.commands import (
    add_cmd,
    delete_cmd,
    doctor_cmd,
    download_cmd,
    edit_cmd,
    init_cmd,
    list_cmd,
    show_cmd,
    stats_cmd,
    sweep_cmd,
    web_cmd,
)
from edulibrary.cli.context import CLIContext
from edulibrary.core.config import load_paths
from edulibrary.core.errors import LibraryError
from edulibrary.core.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edulib",
        description="Edu Library catalog CLI",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Project root to use for .edulib data (default: current working directory)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)

    subparsers = parser.add_subparsers(dest="command", required=True)
    init_cmd.register(subparsers)
    add_cmd.register(subparsers)
    edit_cmd.register(subparsers)
    delete_cmd.register(subparsers)
    list_cmd.register(subparsers)
    show_cmd.register(subparsers)
    download_cmd.register(subparsers)
    stats_cmd.register(subparsers)
    doctor_cmd.register(subparsers)
    sweep_cmd.register(subparsers)
    web_cmd.register(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    paths = load_paths(args.project_root)
    ctx = CLIContext(paths=paths, console=console)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    try:
        return handler(args, ctx)
    except LibraryError as exc:
        logger.error(str(exc))
        return 1
