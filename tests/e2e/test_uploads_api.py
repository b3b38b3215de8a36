import pytest
from fastapi.testclient import TestClient

from catalog_api.dependencies import get_media_store

from conftest import PNG_BYTES, stored_files, upload

pytestmark = pytest.mark.e2e


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_upload_without_file(client):
    response = client.post("/upload/categories")
    assert response.status_code == 400
    assert response.json() == {"error": "No file received"}


def test_upload_returns_absolute_url(client):
    response = client.post("/upload/categories", files={"image": upload("pumps.png")})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["fileUrl"].startswith("http://testserver/uploads/categories/")

    path = body["fileUrl"][len("http://testserver"):]
    assert client.get(path).content == PNG_BYTES


def test_uploaded_url_can_be_used_for_a_category(client):
    file_url = client.post(
        "/upload/categories", files={"image": upload("pumps.png")}
    ).json()["fileUrl"]

    response = client.post(
        "/categories",
        data={"name": "Pumps", "description": "Industrial pumps unit", "imageUrl": file_url},
    )
    assert response.status_code == 201
    category = response.json()
    assert category["imageUrl"] == file_url

    # deleting the category removes the uploaded file too
    client.delete(f"/categories/{category['id']}")
    assert client.get(file_url[len("http://testserver"):]).status_code == 404


def test_upload_rejects_non_images(client, upload_root):
    response = client.post(
        "/upload/categories",
        files={"image": upload("notes.txt", "text/plain", b"hello")},
    )
    assert response.status_code == 400
    assert stored_files(upload_root) == []


def test_unexpected_failure_is_opaque(app):
    class BrokenStore:
        def store(self, owner_kind, file):
            raise RuntimeError("disk controller on fire")

    app.dependency_overrides[get_media_store] = lambda: BrokenStore()
    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.post("/upload/categories", files={"image": upload()})
    del app.dependency_overrides[get_media_store]

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
