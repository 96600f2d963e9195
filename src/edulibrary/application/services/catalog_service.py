from __future__ import annotations

import logging
from dataclasses import replace

from edulibrary.application.services.file_ingestion_service import FileIngestionService
from edulibrary.application.services.query_builder import DEFAULT_RECENT_LIMIT, build_query, recent_query
from edulibrary.core.errors import ResourceNotFoundError, StoreWriteError, ValidationError
from edulibrary.domain.models.query import FilterState
from edulibrary.domain.models.resource import (
    CatalogStats,
    FilePayload,
    FileReference,
    Resource,
    ResourceDraft,
)
from edulibrary.infrastructure.db.repos.resource_repo import ResourceRepo

logger = logging.getLogger(__name__)


def _check_payload(file_payload: FilePayload | None) -> None:
    if file_payload is not None and not file_payload.data:
        raise ValidationError(f"Uploaded file is empty: {file_payload.filename}")


class CatalogService:
    """Reads and writes against the resource collection.

    Files are always uploaded before the metadata row that references them is
    written. If the write then fails the blob is left unreferenced; that is
    logged as an orphan and the store error is re-raised. Nothing is retried
    and nothing is cached between calls.
    """

    def __init__(self, resource_repo: ResourceRepo, file_ingestion: FileIngestionService) -> None:
        self.resource_repo = resource_repo
        self.file_ingestion = file_ingestion

    def list_resources(self, filter_state: FilterState | None = None, limit: int | None = None) -> list[Resource]:
        return self.resource_repo.list(build_query(filter_state, limit=limit))

    def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[Resource]:
        return self.resource_repo.list(recent_query(limit))

    def get(self, resource_id: str) -> Resource:
        resource = self.resource_repo.get_by_id(resource_id)
        if resource is None:
            raise ResourceNotFoundError(resource_id)
        return resource

    def stats(self) -> CatalogStats:
        return self.resource_repo.stats()

    def create(
        self,
        draft: ResourceDraft,
        file_payload: FilePayload | None = None,
        existing_file: FileReference | None = None,
    ) -> Resource:
        draft.validate()
        if file_payload is None and (existing_file is None or not existing_file.file_url):
            raise ValidationError("A file upload or an existing file reference is required to create a resource")
        _check_payload(file_payload)

        file_ref = existing_file
        uploaded_key: str | None = None
        if file_payload is not None:
            stored = self.file_ingestion.upload(file_payload.data, file_payload.filename)
            file_ref = stored.as_reference()
            uploaded_key = stored.storage_key

        try:
            resource = self.resource_repo.insert(draft, file_ref)
        except StoreWriteError as exc:
            self._record_orphan(exc, uploaded_key, "create")
            raise

        logger.info("Created resource %s (%s)", resource.id, resource.title)
        return resource

    def update(
        self,
        resource_id: str,
        draft: ResourceDraft,
        file_payload: FilePayload | None = None,
    ) -> Resource:
        draft.validate()
        _check_payload(file_payload)
        existing = self.get(resource_id)

        file_ref = FileReference(
            file_url=existing.file_url,
            file_type=existing.file_type,
            storage_key=existing.storage_key,
        )
        uploaded_key: str | None = None
        if file_payload is not None:
            stored = self.file_ingestion.upload(file_payload.data, file_payload.filename)
            file_ref = stored.as_reference()
            uploaded_key = stored.storage_key

        try:
            updated = self.resource_repo.update_metadata(resource_id, draft, file_ref)
        except StoreWriteError as exc:
            self._record_orphan(exc, uploaded_key, f"update of {resource_id}")
            raise
        if not updated:
            self._log_orphan(uploaded_key, f"update of {resource_id}")
            raise ResourceNotFoundError(resource_id)

        logger.info("Updated resource %s", resource_id)
        return self.get(resource_id)

    def delete(self, resource_id: str) -> None:
        # Metadata only; the blob stays behind for the orphan sweep.
        if not self.resource_repo.delete(resource_id):
            raise ResourceNotFoundError(resource_id)
        logger.info("Deleted resource %s", resource_id)

    def increment_download_count(self, resource_id: str) -> Resource:
        """Read the current count and write it back plus one.

        There is no compare-and-swap, so simultaneous downloads of the same
        resource can lose increments. The count never goes down and is never
        bumped twice for one call.
        """
        current = self.get(resource_id)
        next_count = current.download_count + 1
        updated_at = self.resource_repo.update_download_count(resource_id, next_count)
        if updated_at is None:
            raise ResourceNotFoundError(resource_id)
        return replace(current, download_count=next_count, updated_at=updated_at)

    @classmethod
    def _record_orphan(cls, exc: StoreWriteError, uploaded_key: str | None, operation: str) -> None:
        if uploaded_key is not None:
            exc.orphaned_key = uploaded_key
        cls._log_orphan(uploaded_key, operation)

    @staticmethod
    def _log_orphan(uploaded_key: str | None, operation: str) -> None:
        if uploaded_key is None:
            return
        logger.warning(
            "Orphaned blob %s: upload succeeded but the %s did not persist a row referencing it",
            uploaded_key,
            operation,
        )
