from __future__ import annotations

import argparse

from edulibrary.cli.context import CLIContext
from edulibrary.cli.render import resource_detail_table


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("show", help="Show one catalog entry")
    parser.add_argument("resource_id")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    resource = ctx.catalog().get(args.resource_id)
    ctx.console.print(resource_detail_table(resource))
    return 0
