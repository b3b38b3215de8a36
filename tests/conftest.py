"""
Shared pytest fixtures.
"""
import sys
import os
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

# Add backend directory to sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../backend"))

from catalog_api.config import Settings
from catalog_api.database import Database
from catalog_api.main import create_app
from catalog_api.services.auth_service import AuthService
from catalog_api.services.media_store import IncomingFile, MediaStore

# Smallest payloads that pass the extension/MIME checks; content is not inspected
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "secret123"


def png(name: str = "photo.png") -> IncomingFile:
    return IncomingFile(filename=name, content_type="image/png", data=PNG_BYTES)


def upload(name: str = "photo.png", content_type: str = "image/png", data: bytes = PNG_BYTES):
    """Tuple for the ``files=`` argument of TestClient requests."""
    return (name, data, content_type)


def stored_files(root) -> list:
    return sorted(p.resolve() for p in Path(root).rglob("*") if p.is_file())


def category_ids_of(product) -> list:
    return [c.id for c in product.categories]


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at an in-memory database and a temporary upload dir"""
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite:///:memory:",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        SECRET_KEY="test-secret-key",
        BCRYPT_ROUNDS=4,
        RATE_LIMIT_ENABLED=False,
        ENABLE_FILE_LOGGING=False,
    )


@pytest.fixture
def database(test_settings) -> Generator[Database, None, None]:
    db = Database.from_settings(test_settings).open()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def test_db(database) -> Generator[Session, None, None]:
    """Session on a fresh in-memory database"""
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def media(test_settings) -> MediaStore:
    store = MediaStore.from_settings(test_settings)
    store.ensure_directories()
    return store


@pytest.fixture
def upload_root(test_settings) -> Path:
    return Path(test_settings.UPLOAD_DIR)


@pytest.fixture
def app(test_settings):
    return create_app(test_settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_user(app, client, test_settings):
    """User created directly in the application's database"""
    with app.state.db.session_scope() as session:
        user = AuthService(test_settings).create_user(
            session, ADMIN_USERNAME, ADMIN_PASSWORD
        )
        return {"id": user.id, "username": user.username}


@pytest.fixture
def auth_headers(client, admin_user):
    response = client.post(
        "/auth/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
