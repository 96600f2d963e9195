from __future__ import annotations

import argparse
import shutil
from pathlib import Path

from edulibrary.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("download", help="Count a download and optionally copy the file out")
    parser.add_argument("resource_id")
    parser.add_argument("--output", type=Path, help="Copy the stored file to this path")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    catalog = ctx.catalog()
    resource = catalog.increment_download_count(args.resource_id)

    ctx.console.print(f"[green]Downloads[/green] {resource.download_count}")
    ctx.console.print(f"[green]File URL[/green] {resource.file_url}")

    if args.output is not None:
        if not resource.storage_key:
            ctx.console.print("[yellow]File is hosted externally; nothing to copy[/yellow]")
            return 1
        source = ctx.blob_store().path_for_key(resource.storage_key)
        if not source.is_file():
            ctx.console.print(f"[red]Stored file is missing[/red] {resource.storage_key}")
            return 1
        target = args.output.expanduser()
        if target.is_dir():
            target = target / resource.storage_key
        shutil.copyfile(source, target)
        ctx.console.print(f"[green]Saved[/green] {target}")
    return 0
