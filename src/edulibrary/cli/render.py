from __future__ import annotations

from rich.table import Table

from edulibrary.domain.models.resource import Resource


def resources_table(resources: list[Resource], title: str) -> Table:
    table = Table(title=f"{title} ({len(resources)})")
    table.add_column("ID", overflow="fold")
    table.add_column("Title", overflow="fold")
    table.add_column("Subject")
    table.add_column("Level")
    table.add_column("Category")
    table.add_column("Type")
    table.add_column("Downloads", justify="right")
    table.add_column("Created")

    for r in resources:
        table.add_row(
            r.id,
            r.title,
            r.subject,
            r.level,
            r.category,
            r.file_type or "-",
            str(r.download_count),
            r.created_at,
        )
    return table


def resource_detail_table(resource: Resource) -> Table:
    table = Table(title=resource.title, show_header=False)
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    table.add_row("ID", resource.id)
    table.add_row("Description", resource.description or "-")
    table.add_row("Subject", resource.subject)
    table.add_row("Level", resource.level)
    table.add_row("Category", resource.category)
    table.add_row("File URL", resource.file_url)
    table.add_row("File Type", f"{resource.file_type or '-'} ({resource.preview_kind})")
    table.add_row("Downloads", str(resource.download_count))
    table.add_row("Created", resource.created_at)
    table.add_row("Updated", resource.updated_at)
    return table
