from __future__ import annotations

import os

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

import routes
from config.settings import settings
from controller.controller_dependencies import get_current_identity
from fakes import FakeDrive, make_container
from model.identity import Identity


def _identity() -> Identity:
    return Identity(
        family_name="Ruiz",
        given_name="Ana",
        preferred_username="aruiz",
        email="ana@example.edu",
    )


def _build_app(drive: FakeDrive, with_auth_override: bool = True) -> FastAPI:
    app = FastAPI()
    routes.register_routes(app)
    app.state.container = make_container(drive)
    if with_auth_override:
        app.dependency_overrides[get_current_identity] = _identity
    return app


@pytest.fixture(autouse=True)
def _upload_dir(tmp_path, monkeypatch):
    staging = tmp_path / "staging"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(staging))
    return staging


def test_upload_route_stores_documents_and_clears_staging(drive, _upload_dir):
    client = TestClient(_build_app(drive))

    response = client.post(
        "/api/v1/upload",
        files={
            "documentoIdentidad": ("id.pdf", b"%PDF id", "application/pdf"),
            "seguro": ("seguro.pdf", b"%PDF seguro", "application/pdf"),
        },
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Documents uploaded successfully."}
    assert drive.calls_to("create_folder") == [
        ("create_folder", "parent-root", "Ruiz_Ana_aruiz")
    ]
    uploads = drive.calls_to("create_file")
    assert sorted((c[2], c[3]) for c in uploads) == [
        ("id.pdf", "application/pdf"),
        ("seguro.pdf", "application/pdf"),
    ]
    assert len(drive.seen_paths) == 2
    assert os.listdir(_upload_dir) == []


def test_upload_route_returns_503_when_storage_fails(drive, _upload_dir):
    drive.fail_on.add("create_file")
    client = TestClient(_build_app(drive))

    response = client.post(
        "/api/v1/upload",
        files={"seguro": ("seguro.pdf", b"%PDF seguro", "application/pdf")},
    )

    assert response.status_code == 503
    assert response.json() == {"message": "Storage service unavailable. Try again later."}
    assert os.listdir(_upload_dir) == []


def test_upload_route_rejects_unknown_field(drive, _upload_dir):
    client = TestClient(_build_app(drive))

    response = client.post(
        "/api/v1/upload",
        files={
            "seguro": ("seguro.pdf", b"%PDF seguro", "application/pdf"),
            "pasaporte": ("p.pdf", b"%PDF p", "application/pdf"),
        },
    )

    assert response.status_code == 422
    assert response.json() == {"message": "Unexpected document field"}
    assert drive.calls == []
    assert os.listdir(_upload_dir) == []


def test_upload_route_rejects_second_file_for_same_field(drive):
    client = TestClient(_build_app(drive))

    response = client.post(
        "/api/v1/upload",
        files=[
            ("seguro", ("a.pdf", b"a", "application/pdf")),
            ("seguro", ("b.pdf", b"b", "application/pdf")),
        ],
    )

    assert response.status_code == 422
    assert drive.calls == []


def test_upload_route_requires_a_document(drive):
    client = TestClient(_build_app(drive))

    response = client.post("/api/v1/upload", data={"note": "nothing attached"})

    assert response.status_code == 422
    assert response.json() == {"message": "At least one document is required"}


def test_upload_route_rejects_oversized_file(drive, monkeypatch, _upload_dir):
    monkeypatch.setattr(settings, "MAX_FILE_MB", 0)
    client = TestClient(_build_app(drive))

    response = client.post(
        "/api/v1/upload",
        files={"seguro": ("seguro.pdf", b"%PDF seguro", "application/pdf")},
    )

    assert response.status_code == 413
    assert drive.calls == []


def test_status_route_reports_not_found(drive):
    client = TestClient(_build_app(drive))

    response = client.get("/api/v1/status")

    assert response.status_code == 200
    assert response.json() == {"status": "not-found", "uploadedFiles": []}
    assert drive.calls_to("create_folder") == []


def test_status_route_lists_uploaded_files(drive):
    folder_id = drive.add_folder("parent-root", "Ruiz_Ana_aruiz")
    drive.files.append({"id": "f1", "name": "fileA-name", "parent": folder_id})
    drive.files.append({"id": "f2", "name": "fileB-name", "parent": folder_id})
    client = TestClient(_build_app(drive))

    response = client.get("/api/v1/status")

    assert response.status_code == 200
    assert response.json() == {
        "status": "found",
        "uploadedFiles": ["fileA-name", "fileB-name"],
    }


def test_status_route_returns_503_on_storage_failure(drive):
    drive.fail_on.add("find_folders")
    client = TestClient(_build_app(drive))

    response = client.get("/api/v1/status")

    assert response.status_code == 503


def test_me_route_echoes_identity(drive):
    client = TestClient(_build_app(drive))

    response = client.get("/api/v1/me")

    assert response.status_code == 200
    assert response.json() == {
        "message": "Hello, Ana Ruiz!",
        "email": "ana@example.edu",
        "username": "aruiz",
    }


def test_routes_require_bearer_token(drive):
    client = TestClient(_build_app(drive, with_auth_override=False))

    for method, path in (("get", "/api/v1/status"), ("post", "/api/v1/upload")):
        response = getattr(client, method)(path)
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid or expired session"}
    assert drive.calls == []
