from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path

from edulibrary.infrastructure.blobstore.store import BlobInfo, BlobStore
from edulibrary.infrastructure.db.repos.resource_repo import ResourceRepo
from edulibrary.infrastructure.db.sqlite import get_connection

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DoctorIssue:
    check: str
    level: str
    message: str


@dataclass(slots=True)
class DoctorReport:
    ok: bool
    checks_run: int
    issues: list[DoctorIssue]
    db_runtime: dict[str, object]
    orphaned_keys: list[str] = field(default_factory=list)


@dataclass(slots=True)
class SweepResult:
    candidates: list[BlobInfo]
    deleted: list[str]
    dry_run: bool


class HealthService:
    def __init__(self, db_path: Path, blob_store: BlobStore) -> None:
        self.db_path = db_path
        self.blob_store = blob_store

    def run_doctor(self) -> DoctorReport:
        issues: list[DoctorIssue] = []
        checks_run = 0
        resource_repo = ResourceRepo(self.db_path)

        # Check 1: database runtime pragmas support concurrent access.
        checks_run += 1
        with get_connection(self.db_path) as conn:
            journal_mode = str(conn.execute("PRAGMA journal_mode;").fetchone()[0]).lower()
            busy_timeout_ms = int(conn.execute("PRAGMA busy_timeout;").fetchone()[0])
            synchronous = int(conn.execute("PRAGMA synchronous;").fetchone()[0])

        db_runtime: dict[str, object] = {
            "journal_mode": journal_mode,
            "busy_timeout_ms": busy_timeout_ms,
            "synchronous": synchronous,
        }
        if journal_mode != "wal":
            issues.append(
                DoctorIssue(
                    check="db_runtime",
                    level="error",
                    message=f"SQLite journal_mode is '{journal_mode}', expected 'wal' for concurrent access.",
                )
            )
        if busy_timeout_ms <= 0:
            issues.append(
                DoctorIssue(
                    check="db_runtime",
                    level="error",
                    message="SQLite busy_timeout is disabled; concurrent writes may fail immediately.",
                )
            )
        elif busy_timeout_ms < 1_000:
            issues.append(
                DoctorIssue(
                    check="db_runtime",
                    level="warning",
                    message=f"SQLite busy_timeout is low ({busy_timeout_ms}ms); consider >= 1000ms.",
                )
            )

        # Check 2: every row with a stored file still has its blob.
        checks_run += 1
        for res in resource_repo.list():
            if not res.file_url:
                issues.append(
                    DoctorIssue(
                        check="file_reference",
                        level="error",
                        message=f"Resource {res.id} has no file_url",
                    )
                )
                continue
            if res.storage_key and not self.blob_store.exists(res.storage_key):
                issues.append(
                    DoctorIssue(
                        check="file_reference",
                        level="error",
                        message=f"Missing blob {res.storage_key} for resource {res.id}",
                    )
                )

        # Check 3: blobs nothing references.
        checks_run += 1
        orphaned = self.find_orphans()
        for blob in orphaned:
            issues.append(
                DoctorIssue(
                    check="orphaned_blob",
                    level="warning",
                    message=f"Unreferenced blob {blob.key} ({blob.size_bytes} bytes)",
                )
            )

        return DoctorReport(
            ok=not any(i.level == "error" for i in issues),
            checks_run=checks_run,
            issues=issues,
            db_runtime=db_runtime,
            orphaned_keys=[blob.key for blob in orphaned],
        )

    def find_orphans(self) -> list[BlobInfo]:
        referenced = ResourceRepo(self.db_path).referenced_storage_keys()
        return [blob for blob in self.blob_store.iter_blobs() if blob.key not in referenced]

    def sweep_orphans(
        self,
        older_than: timedelta,
        *,
        dry_run: bool = True,
        now: datetime | None = None,
    ) -> SweepResult:
        """Delete unreferenced blobs last modified before now - older_than."""
        cutoff = (now or datetime.now(timezone.utc)) - older_than
        candidates = [blob for blob in self.find_orphans() if blob.modified_at < cutoff]
        deleted: list[str] = []
        if not dry_run:
            # Re-read references so a row written since the scan keeps its blob.
            referenced = ResourceRepo(self.db_path).referenced_storage_keys()
            for blob in candidates:
                if blob.key in referenced:
                    continue
                if self.blob_store.delete(blob.key):
                    logger.info("Swept orphaned blob %s", blob.key)
                    deleted.append(blob.key)
        return SweepResult(candidates=candidates, deleted=deleted, dry_run=dry_run)
