from __future__ import annotations

import argparse

from edulibrary.cli.context import CLIContext
from edulibrary.cli.render import resources_table
from edulibrary.domain.models.query import FilterState


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("list", help="List catalog entries, newest first")
    parser.add_argument("--search", default="", help="Case-insensitive match on title, description or subject")
    parser.add_argument("--subject", help="Exact subject")
    parser.add_argument("--level", help="Exact level")
    parser.add_argument("--category", help="Exact category")
    parser.add_argument("--limit", type=int)
    parser.add_argument("--recent", action="store_true", help="Only the newest entries (default 6)")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    catalog = ctx.catalog()

    if args.recent:
        resources = catalog.recent(limit=args.limit or 6)
        title = "Recent Resources"
    else:
        state = FilterState.from_selections(
            search_term=args.search,
            subject=args.subject,
            level=args.level,
            category=args.category,
        )
        resources = catalog.list_resources(state, limit=args.limit)
        title = "Resources" if state.is_unfiltered else "Matching Resources"

    if not resources:
        ctx.console.print("[yellow]No resources match the current filters[/yellow]")
        return 0

    ctx.console.print(resources_table(resources, title))
    return 0
