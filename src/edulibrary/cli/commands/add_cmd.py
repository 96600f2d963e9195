from __future__ import annotations

import argparse
from pathlib import Path

from edulibrary.cli.context import CLIContext
from edulibrary.cli.render import resource_detail_table
from edulibrary.core.errors import ValidationError
from edulibrary.core.files import file_extension
from edulibrary.core.titles import title_from_filename
from edulibrary.domain.models.resource import FilePayload, FileReference, ResourceDraft


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("add", help="Upload a file and create a catalog entry")
    parser.add_argument("path", nargs="?", help="Local file to upload")
    parser.add_argument("--title", help="Title (default: derived from the file name)")
    parser.add_argument("--description", default="")
    parser.add_argument("--subject", default="")
    parser.add_argument("--level", default="")
    parser.add_argument("--category", default="")
    parser.add_argument("--file-url", help="Reference an already hosted file instead of uploading")
    parser.add_argument("--file-type", help="File type for --file-url (default: its extension)")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    catalog = ctx.catalog()

    payload: FilePayload | None = None
    existing: FileReference | None = None
    name_hint = ""
    if args.path:
        path = Path(args.path).expanduser().resolve()
        if not path.is_file():
            raise ValidationError(f"File not found: {path}")
        payload = FilePayload(data=path.read_bytes(), filename=path.name)
        name_hint = path.name
    elif args.file_url:
        existing = FileReference(
            file_url=args.file_url,
            file_type=(args.file_type or file_extension(args.file_url)).lower(),
        )
        name_hint = args.file_url

    draft = ResourceDraft(
        title=args.title if args.title is not None else title_from_filename(name_hint),
        description=args.description,
        subject=args.subject,
        level=args.level,
        category=args.category,
    )
    resource = catalog.create(draft, file_payload=payload, existing_file=existing)

    ctx.console.print(f"[green]Created[/green] {resource.id}")
    ctx.console.print(resource_detail_table(resource))
    return 0
