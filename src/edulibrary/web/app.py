from __future__ import annotations

import logging
import mimetypes
from dataclasses import asdict
from typing import Any

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel

from edulibrary.application.services.admin_session import AdminSession, AdminSessionRegistry
from edulibrary.application.services.catalog_service import CatalogService
from edulibrary.application.services.file_ingestion_service import FileIngestionService
from edulibrary.application.services.project_service import ProjectService
from edulibrary.application.services.query_builder import DEFAULT_RECENT_LIMIT
from edulibrary.core.config import AppPaths, load_admin_token, load_max_upload_bytes, load_public_base_url
from edulibrary.core.errors import (
    AuthorizationError,
    BackendUnavailableError,
    LibraryError,
    ResourceNotFoundError,
    UploadFailedError,
    ValidationError,
)
from edulibrary.domain.models.query import FilterState
from edulibrary.domain.models.resource import (
    CATEGORIES,
    CATEGORIES_SENTINEL,
    LEVELS,
    LEVELS_SENTINEL,
    SUBJECTS,
    SUBJECTS_SENTINEL,
    FilePayload,
    Resource,
    ResourceDraft,
)
from edulibrary.infrastructure.blobstore.store import BlobStore
from edulibrary.infrastructure.db.repos.resource_repo import ResourceRepo

logger = logging.getLogger(__name__)

FILES_ROUTE = "/files"


class AdminSignInRequest(BaseModel):
    token: str
    user: str = "admin"


def _resource_payload(resource: Resource) -> dict[str, Any]:
    payload = asdict(resource)
    payload["preview_kind"] = resource.preview_kind
    return payload


def _http_error(exc: LibraryError) -> HTTPException:
    if isinstance(exc, ResourceNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, AuthorizationError):
        return HTTPException(status_code=401, detail=str(exc))
    if isinstance(exc, UploadFailedError):
        return HTTPException(status_code=502, detail=str(exc))
    if isinstance(exc, BackendUnavailableError):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _read_upload(file: UploadFile | None) -> FilePayload | None:
    if file is None or not file.filename:
        return None
    return FilePayload(data=file.file.read(), filename=file.filename)


def create_app(paths: AppPaths, sessions: AdminSessionRegistry | None = None) -> FastAPI:
    app = FastAPI(title="Edu Library", version="0.1.0")

    ProjectService(paths).init_project()
    public_base_url = load_public_base_url()
    # Relative bases are served here; absolute ones point at an external host.
    files_route = public_base_url if public_base_url.startswith("/") else FILES_ROUTE
    blob_store = BlobStore(paths.blob_dir, public_base_url=public_base_url)
    catalog = CatalogService(
        ResourceRepo(paths.db_path),
        FileIngestionService(blob_store, max_upload_bytes=load_max_upload_bytes()),
    )
    admin_sessions = sessions or AdminSessionRegistry(load_admin_token())

    def _log_session_event(event: str, session: AdminSession) -> None:
        logger.info("Admin %s %s", session.user, event.replace("_", " "))

    admin_sessions.subscribe(_log_session_event)

    def require_admin(authorization: str | None = Header(default=None)) -> AdminSession:
        try:
            return admin_sessions.require(_bearer_token(authorization))
        except AuthorizationError as exc:
            raise _http_error(exc) from exc

    @app.get("/api/health")
    def api_health() -> dict[str, Any]:
        return {"ok": True, "admin_enabled": admin_sessions.enabled}

    @app.get("/api/taxonomy")
    def api_taxonomy() -> dict[str, Any]:
        return {
            "ok": True,
            "subjects": [SUBJECTS_SENTINEL, *SUBJECTS],
            "levels": [LEVELS_SENTINEL, *LEVELS],
            "categories": [CATEGORIES_SENTINEL, *CATEGORIES],
        }

    @app.get("/api/resources")
    def api_resources(
        search: str = "",
        subject: str | None = None,
        level: str | None = None,
        category: str | None = None,
        limit: int | None = Query(default=None, ge=1, le=100000),
    ) -> dict[str, Any]:
        state = FilterState.from_selections(
            search_term=search,
            subject=subject,
            level=level,
            category=category,
        )
        try:
            resources = catalog.list_resources(state, limit=limit)
        except LibraryError as exc:
            raise _http_error(exc) from exc
        return {
            "ok": True,
            "count": len(resources),
            "resources": [_resource_payload(r) for r in resources],
        }

    @app.get("/api/resources/recent")
    def api_recent_resources(limit: int = Query(default=DEFAULT_RECENT_LIMIT, ge=1, le=100)) -> dict[str, Any]:
        try:
            resources = catalog.recent(limit=limit)
        except LibraryError as exc:
            raise _http_error(exc) from exc
        return {
            "ok": True,
            "count": len(resources),
            "resources": [_resource_payload(r) for r in resources],
        }

    @app.get("/api/resources/{resource_id}")
    def api_resource_detail(resource_id: str) -> dict[str, Any]:
        try:
            resource = catalog.get(resource_id)
        except LibraryError as exc:
            raise _http_error(exc) from exc
        return {"ok": True, "resource": _resource_payload(resource)}

    @app.post("/api/resources/{resource_id}/download")
    def api_resource_download(resource_id: str) -> dict[str, Any]:
        try:
            resource = catalog.increment_download_count(resource_id)
        except LibraryError as exc:
            raise _http_error(exc) from exc
        return {"ok": True, "resource": _resource_payload(resource), "file_url": resource.file_url}

    @app.get("/api/stats")
    def api_stats() -> dict[str, Any]:
        try:
            stats = catalog.stats()
        except LibraryError as exc:
            raise _http_error(exc) from exc
        return {"ok": True, **asdict(stats)}

    @app.post("/api/admin/session")
    def api_admin_sign_in(req: AdminSignInRequest) -> dict[str, Any]:
        try:
            session = admin_sessions.sign_in(req.token, user=req.user)
        except AuthorizationError as exc:
            raise _http_error(exc) from exc
        return {"ok": True, "session_token": session.token, "user": session.user}

    @app.delete("/api/admin/session")
    def api_admin_sign_out(session: AdminSession = Depends(require_admin)) -> dict[str, Any]:
        admin_sessions.sign_out(session.token)
        return {"ok": True}

    @app.post("/api/resources")
    def api_resource_create(
        title: str = Form(...),
        description: str = Form(""),
        subject: str = Form(""),
        level: str = Form(""),
        category: str = Form(""),
        file: UploadFile | None = File(default=None),
        session: AdminSession = Depends(require_admin),
    ) -> dict[str, Any]:
        draft = ResourceDraft(
            title=title,
            description=description,
            subject=subject,
            level=level,
            category=category,
        )
        try:
            resource = catalog.create(draft, file_payload=_read_upload(file))
        except LibraryError as exc:
            raise _http_error(exc) from exc
        return {"ok": True, "resource": _resource_payload(resource)}

    @app.put("/api/resources/{resource_id}")
    def api_resource_update(
        resource_id: str,
        title: str = Form(...),
        description: str = Form(""),
        subject: str = Form(""),
        level: str = Form(""),
        category: str = Form(""),
        file: UploadFile | None = File(default=None),
        session: AdminSession = Depends(require_admin),
    ) -> dict[str, Any]:
        draft = ResourceDraft(
            title=title,
            description=description,
            subject=subject,
            level=level,
            category=category,
        )
        try:
            resource = catalog.update(resource_id, draft, file_payload=_read_upload(file))
        except LibraryError as exc:
            raise _http_error(exc) from exc
        return {"ok": True, "resource": _resource_payload(resource)}

    @app.delete("/api/resources/{resource_id}")
    def api_resource_delete(resource_id: str, session: AdminSession = Depends(require_admin)) -> dict[str, Any]:
        try:
            catalog.delete(resource_id)
        except LibraryError as exc:
            raise _http_error(exc) from exc
        return {"ok": True, "deleted": resource_id}

    @app.get(files_route + "/{key}")
    def files_content(key: str) -> FileResponse:
        try:
            path = blob_store.path_for_key(key)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Invalid file key.") from exc
        if not path.is_file():
            raise HTTPException(status_code=404, detail=f"File not found: {key}")
        media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return FileResponse(path=str(path), media_type=media_type)

    return app
