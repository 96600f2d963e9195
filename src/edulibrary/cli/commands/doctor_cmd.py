from __future__ import annotations

import argparse

from rich.panel import Panel
from rich.table import Table

from edulibrary.application.services.health_service import HealthService
from edulibrary.application.services.project_service import ProjectService
from edulibrary.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("doctor", help="Check that catalog rows and stored files agree")
    parser.set_defaults(handler=run_doctor)


def run_doctor(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()

    service = HealthService(db_path=ctx.paths.db_path, blob_store=ctx.blob_store())
    report = service.run_doctor()

    summary = Panel.fit(
        f"Checks run: {report.checks_run}\n"
        f"Issues: {len(report.issues)}\n"
        f"Orphaned blobs: {len(report.orphaned_keys)}\n"
        f"Status: {'PASS' if report.ok else 'FAIL'}",
        title="Doctor Summary",
    )
    ctx.console.print(summary)

    runtime = Table(title="Database Runtime")
    runtime.add_column("Setting")
    runtime.add_column("Value", overflow="fold")
    for key, value in report.db_runtime.items():
        runtime.add_row(str(key), str(value))
    ctx.console.print(runtime)

    if report.issues:
        out = Table(title="Doctor Issues")
        out.add_column("Level")
        out.add_column("Check")
        out.add_column("Message", overflow="fold")
        for issue in report.issues:
            out.add_row(issue.level, issue.check, issue.message)
        ctx.console.print(out)

    return 0 if report.ok else 1
