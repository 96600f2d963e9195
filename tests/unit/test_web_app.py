from __future__ import annotations

from pathlib import Path

from fastapi.testclient import TestClient

from edulibrary.application.services.admin_session import AdminSessionRegistry
from edulibrary.core.config import AppPaths
from edulibrary.web.app import create_app


def _paths(tmp_path: Path) -> AppPaths:
    library_dir = tmp_path / "proj" / ".edulib"
    return AppPaths(
        project_root=tmp_path / "proj",
        library_dir=library_dir,
        db_path=library_dir / "library.db",
        blob_dir=library_dir / "files",
    )


def _client(tmp_path: Path) -> TestClient:
    return TestClient(create_app(_paths(tmp_path), sessions=AdminSessionRegistry("s3cret")))


def _admin_headers(client: TestClient) -> dict[str, str]:
    r = client.post("/api/admin/session", json={"token": "s3cret"})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['session_token']}"}


def test_web_app_end_to_end_smoke(tmp_path: Path) -> None:
    client = _client(tmp_path)
    headers = _admin_headers(client)

    r = client.get("/api/resources")
    assert r.status_code == 200
    assert r.json()["count"] == 0

    payload = b"%PDF-1.4 " + b"x" * 5000
    r = client.post(
        "/api/resources",
        data={
            "title": "T",
            "description": "Week one",
            "subject": "Physics",
            "level": "A-Level",
            "category": "Notes",
        },
        files={"file": ("notes.pdf", payload, "application/pdf")},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    resource = r.json()["resource"]
    assert resource["file_type"] == "pdf"
    assert resource["preview_kind"] == "document"
    resource_id = resource["id"]

    r = client.get(resource["file_url"])
    assert r.status_code == 200
    assert r.content == payload

    r = client.get("/api/resources", params={"search": "WEEK", "subject": "Physics", "level": "All Levels"})
    assert [item["id"] for item in r.json()["resources"]] == [resource_id]

    r = client.get("/api/resources", params={"subject": "Mathematics"})
    assert r.json()["count"] == 0

    r = client.post(f"/api/resources/{resource_id}/download")
    assert r.status_code == 200
    assert r.json()["resource"]["download_count"] == 1
    assert r.json()["file_url"] == resource["file_url"]

    r = client.put(
        f"/api/resources/{resource_id}",
        data={"title": "T2", "subject": "Physics", "level": "A-Level", "category": "Notes"},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    edited = r.json()["resource"]
    assert edited["title"] == "T2"
    assert edited["file_url"] == resource["file_url"]
    assert edited["download_count"] == 1

    r = client.get("/api/stats")
    assert r.json()["total_resources"] == 1
    assert r.json()["total_downloads"] == 1

    r = client.get("/api/resources/recent", params={"limit": 1})
    assert r.json()["count"] == 1

    r = client.delete(f"/api/resources/{resource_id}", headers=headers)
    assert r.status_code == 200
    r = client.get(f"/api/resources/{resource_id}")
    assert r.status_code == 404


def test_mutations_require_admin_session(tmp_path: Path) -> None:
    client = _client(tmp_path)

    r = client.post(
        "/api/resources",
        data={"title": "T"},
        files={"file": ("notes.pdf", b"data", "application/pdf")},
    )
    assert r.status_code == 401
    assert client.delete("/api/resources/x", headers={"Authorization": "Bearer nope"}).status_code == 401

    r = client.post("/api/admin/session", json={"token": "wrong"})
    assert r.status_code == 401

    headers = _admin_headers(client)
    assert client.delete("/api/admin/session", headers=headers).status_code == 200
    assert client.delete("/api/resources/x", headers=headers).status_code == 401


def test_create_without_file_is_a_validation_error(tmp_path: Path) -> None:
    client = _client(tmp_path)
    headers = _admin_headers(client)

    r = client.post("/api/resources", data={"title": "No file"}, headers=headers)
    assert r.status_code == 400
    assert client.get("/api/resources").json()["count"] == 0


def test_unknown_ids_and_files_return_404(tmp_path: Path) -> None:
    client = _client(tmp_path)
    headers = _admin_headers(client)

    assert client.get("/api/resources/missing").status_code == 404
    assert client.post("/api/resources/missing/download").status_code == 404
    assert client.delete("/api/resources/missing", headers=headers).status_code == 404
    assert client.get("/files/missing.pdf").status_code == 404
    assert client.get("/files/.hidden").status_code == 400


def test_taxonomy_lists_sentinels_first(tmp_path: Path) -> None:
    client = _client(tmp_path)
    body = client.get("/api/taxonomy").json()
    assert body["subjects"][0] == "All Subjects"
    assert body["levels"] == ["All Levels", "O-Level", "A-Level", "University", "General"]
    assert body["categories"][0] == "All Categories"


def test_file_urls_resolve_under_a_custom_relative_base(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("EDULIB_PUBLIC_BASE_URL", "/static/blobs/")
    client = _client(tmp_path)
    headers = _admin_headers(client)

    r = client.post(
        "/api/resources",
        data={"title": "Optics"},
        files={"file": ("optics.pdf", b"lenses", "application/pdf")},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    file_url = r.json()["resource"]["file_url"]
    assert file_url.startswith("/static/blobs/")

    r = client.get(file_url)
    assert r.status_code == 200
    assert r.content == b"lenses"
    assert client.get("/static/blobs/missing.pdf").status_code == 404
