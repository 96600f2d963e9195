from __future__ import annotations

import argparse

from edulibrary.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser(
        "delete",
        help="Delete a catalog entry (the stored file is left for 'edulib sweep')",
    )
    parser.add_argument("resource_id")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    ctx.catalog().delete(args.resource_id)
    ctx.console.print(f"[green]Deleted[/green] {args.resource_id}")
    return 0
