from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

from edulibrary.core.errors import BackendUnavailableError, StoreError, StoreWriteError
from edulibrary.core.ids import new_uuid
from edulibrary.core.time import now_utc_iso
from edulibrary.domain.models.query import MatchAll, ResourceQuery
from edulibrary.domain.models.resource import CatalogStats, FileReference, Resource, ResourceDraft
from edulibrary.infrastructure.db.predicates import compile_query
from edulibrary.infrastructure.db.sqlite import get_connection


@contextmanager
def _store_errors(operation: str, *, write: bool = False) -> Iterator[None]:
    try:
        yield
    except sqlite3.OperationalError as exc:
        if write:
            raise StoreWriteError(f"{operation} failed: {exc}") from exc
        raise BackendUnavailableError(f"{operation} failed, metadata store unavailable: {exc}") from exc
    except sqlite3.Error as exc:
        if write:
            raise StoreWriteError(f"{operation} failed: {exc}") from exc
        raise StoreError(f"{operation} failed: {exc}") from exc


class ResourceRepo:
    def __init__(self, db_path: Path, clock: Callable[[], str] = now_utc_iso) -> None:
        self.db_path = db_path
        self.clock = clock

    def insert(self, draft: ResourceDraft, file_ref: FileReference) -> Resource:
        resource_id = new_uuid()
        stamp = self.clock()
        with _store_errors("insert resource", write=True):
            with get_connection(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT INTO resources (
                        id,
                        title,
                        description,
                        subject,
                        level,
                        category,
                        file_url,
                        file_type,
                        storage_key,
                        download_count,
                        created_at,
                        updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?)
                    """,
                    (
                        resource_id,
                        draft.title,
                        draft.description,
                        draft.subject,
                        draft.level,
                        draft.category,
                        file_ref.file_url,
                        file_ref.file_type,
                        file_ref.storage_key,
                        stamp,
                        stamp,
                    ),
                )
                conn.commit()
        return Resource(
            id=resource_id,
            title=draft.title,
            description=draft.description,
            subject=draft.subject,
            level=draft.level,
            category=draft.category,
            file_url=file_ref.file_url,
            file_type=file_ref.file_type,
            download_count=0,
            created_at=stamp,
            updated_at=stamp,
            storage_key=file_ref.storage_key,
        )

    def update_metadata(self, resource_id: str, draft: ResourceDraft, file_ref: FileReference) -> bool:
        with _store_errors(f"update resource {resource_id}", write=True):
            with get_connection(self.db_path) as conn:
                cursor = conn.execute(
                    """
                    UPDATE resources
                    SET title = ?,
                        description = ?,
                        subject = ?,
                        level = ?,
                        category = ?,
                        file_url = ?,
                        file_type = ?,
                        storage_key = ?,
                        updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        draft.title,
                        draft.description,
                        draft.subject,
                        draft.level,
                        draft.category,
                        file_ref.file_url,
                        file_ref.file_type,
                        file_ref.storage_key,
                        self.clock(),
                        resource_id,
                    ),
                )
                conn.commit()
        return cursor.rowcount > 0

    def update_download_count(self, resource_id: str, download_count: int) -> str | None:
        """Overwrite the counter; returns the new updated_at, or None if the row is gone."""
        stamp = self.clock()
        with _store_errors(f"update download count for {resource_id}", write=True):
            with get_connection(self.db_path) as conn:
                cursor = conn.execute(
                    """
                    UPDATE resources
                    SET download_count = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (download_count, stamp, resource_id),
                )
                conn.commit()
        return stamp if cursor.rowcount > 0 else None

    def delete(self, resource_id: str) -> bool:
        with _store_errors(f"delete resource {resource_id}", write=True):
            with get_connection(self.db_path) as conn:
                cursor = conn.execute("DELETE FROM resources WHERE id = ?", (resource_id,))
                conn.commit()
        return cursor.rowcount > 0

    def get_by_id(self, resource_id: str) -> Resource | None:
        with _store_errors(f"get resource {resource_id}"):
            with get_connection(self.db_path) as conn:
                row = conn.execute(
                    "SELECT * FROM resources WHERE id = ?",
                    (resource_id,),
                ).fetchone()
        return self._to_model(row) if row else None

    def list(self, query: ResourceQuery | None = None) -> list[Resource]:
        sql, params = compile_query(query or ResourceQuery(predicate=MatchAll()))
        with _store_errors("list resources"):
            with get_connection(self.db_path) as conn:
                rows = conn.execute(sql, params).fetchall()
        return [self._to_model(row) for row in rows]

    def stats(self) -> CatalogStats:
        with _store_errors("read catalog stats"):
            with get_connection(self.db_path) as conn:
                row = conn.execute(
                    """
                    SELECT
                        COUNT(*) AS total_resources,
                        COALESCE(SUM(download_count), 0) AS total_downloads,
                        COUNT(DISTINCT subject) AS subjects
                    FROM resources
                    """
                ).fetchone()
        return CatalogStats(
            total_resources=int(row["total_resources"]),
            total_downloads=int(row["total_downloads"]),
            subjects=int(row["subjects"]),
        )

    def referenced_storage_keys(self) -> set[str]:
        with _store_errors("list referenced storage keys"):
            with get_connection(self.db_path) as conn:
                rows = conn.execute(
                    "SELECT DISTINCT storage_key FROM resources WHERE storage_key IS NOT NULL"
                ).fetchall()
        return {str(row["storage_key"]) for row in rows}

    @staticmethod
    def _to_model(row: sqlite3.Row) -> Resource:
        return Resource(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            subject=row["subject"],
            level=row["level"],
            category=row["category"],
            file_url=row["file_url"],
            file_type=row["file_type"],
            download_count=int(row["download_count"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            storage_key=row["storage_key"],
        )
