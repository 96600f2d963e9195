from __future__ import annotations

import argparse

from rich.panel import Panel

from edulibrary.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("stats", help="Show catalog totals")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    stats = ctx.catalog().stats()
    ctx.console.print(
        Panel.fit(
            f"Resources: {stats.total_resources}\n"
            f"Downloads: {stats.total_downloads}\n"
            f"Subjects: {stats.subjects}",
            title="Library Stats",
        )
    )
    return 0
