from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console

from edulibrary.application.services.catalog_service import CatalogService
from edulibrary.application.services.file_ingestion_service import FileIngestionService
from edulibrary.application.services.project_service import ProjectService
from edulibrary.core.config import AppPaths, load_max_upload_bytes, load_public_base_url
from edulibrary.infrastructure.blobstore.store import BlobStore
from edulibrary.infrastructure.db.repos.resource_repo import ResourceRepo


@dataclass(slots=True)
class CLIContext:
    paths: AppPaths
    console: Console

    def blob_store(self) -> BlobStore:
        return BlobStore(self.paths.blob_dir, public_base_url=load_public_base_url())

    def catalog(self) -> CatalogService:
        ProjectService(self.paths).require_initialized()
        ingestion = FileIngestionService(self.blob_store(), max_upload_bytes=load_max_upload_bytes())
        return CatalogService(ResourceRepo(self.paths.db_path), ingestion)
