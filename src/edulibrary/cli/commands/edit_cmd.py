from __future__ import annotations

import argparse
from pathlib import Path

from edulibrary.cli.context import CLIContext
from edulibrary.cli.render import resource_detail_table
from edulibrary.core.errors import ValidationError
from edulibrary.domain.models.resource import FilePayload, ResourceDraft


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("edit", help="Edit a catalog entry, optionally replacing its file")
    parser.add_argument("resource_id")
    parser.add_argument("--title")
    parser.add_argument("--description")
    parser.add_argument("--subject")
    parser.add_argument("--level")
    parser.add_argument("--category")
    parser.add_argument("--file", dest="file_path", help="Replacement file to upload")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    catalog = ctx.catalog()
    current = catalog.get(args.resource_id)

    draft = ResourceDraft(
        title=args.title if args.title is not None else current.title,
        description=args.description if args.description is not None else current.description,
        subject=args.subject if args.subject is not None else current.subject,
        level=args.level if args.level is not None else current.level,
        category=args.category if args.category is not None else current.category,
    )

    payload: FilePayload | None = None
    if args.file_path:
        path = Path(args.file_path).expanduser().resolve()
        if not path.is_file():
            raise ValidationError(f"File not found: {path}")
        payload = FilePayload(data=path.read_bytes(), filename=path.name)

    resource = catalog.update(args.resource_id, draft, file_payload=payload)

    ctx.console.print(f"[green]Updated[/green] {resource.id}")
    ctx.console.print(resource_detail_table(resource))
    return 0
