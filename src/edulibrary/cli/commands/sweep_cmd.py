from __future__ import annotations

import argparse
from datetime import timedelta

from rich.table import Table

from edulibrary.application.services.health_service import HealthService
from edulibrary.application.services.project_service import ProjectService
from edulibrary.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("sweep", help="Remove stored files no catalog entry references")
    parser.add_argument(
        "--older-than-hours",
        type=float,
        default=24.0,
        help="Only consider files untouched for this long (default: 24)",
    )
    parser.add_argument("--apply", action="store_true", help="Delete files instead of listing them")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()

    service = HealthService(db_path=ctx.paths.db_path, blob_store=ctx.blob_store())
    result = service.sweep_orphans(timedelta(hours=args.older_than_hours), dry_run=not args.apply)

    table = Table(title=f"Orphaned Files ({len(result.candidates)})")
    table.add_column("Key", overflow="fold")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Status")
    deleted = set(result.deleted)
    for blob in result.candidates:
        if result.dry_run:
            status = "would delete"
        else:
            status = "deleted" if blob.key in deleted else "kept"
        table.add_row(blob.key, str(blob.size_bytes), blob.modified_at.isoformat(), status)
    ctx.console.print(table)

    if result.dry_run and result.candidates:
        ctx.console.print("[yellow]Dry run; pass --apply to delete[/yellow]")
    return 0
