"""
Brainboard Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.

Fixture Hierarchy (all function-scoped):
    ├── storage:          InMemoryObjectStorage (records puts/deletes, can fail on demand)
    ├── settings:         Settings pointing at a per-test SQLite file
    ├── app:              create_app(settings, storage) with tables created
    ├── client:           HTTPX AsyncClient over ASGITransport
    ├── db_session:       AsyncSession on the same database, for service-level tests
    ├── mock_db_session:  AsyncMock session for failure injection
    └── register:         signs a user up and returns (headers, user_id)
"""

import os
import tempfile
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any brainboard imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="brainboard_test_"), "import.db"
)
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="brainboard_files_")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from brainboard.config import Settings  # noqa: E402
from brainboard.exceptions import ObjectStorageError  # noqa: E402
from brainboard.main import create_app  # noqa: E402
from brainboard.services.object_storage import ObjectStorage  # noqa: E402


class InMemoryObjectStorage(ObjectStorage):
    """ObjectStorage double: keeps blobs in a dict and fails when told to."""

    base_url = "https://test-bucket.s3.us-east-1.amazonaws.com"

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.fail_puts = False
        self.fail_deletes = False

    async def put(self, key: str, content: bytes, content_type: Optional[str] = None) -> str:
        if self.fail_puts:
            raise ObjectStorageError(message="Failed to upload file", context={"key": key})
        self.objects[key] = content
        return f"{self.base_url}/{key}"

    async def delete(self, key: str) -> None:
        if self.fail_deletes:
            raise ObjectStorageError(message="Failed to delete file", context={"key": key})
        self.objects.pop(key, None)
        self.deleted.append(key)


@pytest.fixture
def storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'brainboard.db'}",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        storage_backend="local",
        storage_root=str(tmp_path / "files"),
        public_base_url="http://test",
        cors_origins="http://localhost:5173",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings, storage):
    application = create_app(settings, object_storage=storage)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(app):
    async with app.state.database.session_factory() as session:
        yield session


@pytest.fixture
def services(app):
    return app.state.services


@pytest.fixture
def mock_db_session():
    """AsyncSession stand-in for failure injection; no database behind it."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def register(client):
    """Returns an async helper: await register("a@example.com") -> (headers, user_id)."""

    async def _register(email: str, password: str = "correct horse"):
        response = await client.post("/signup", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        headers = {"Authorization": f"Bearer {response.json()['token']}"}
        me = await client.get("/me", headers=headers)
        assert me.status_code == 200, me.text
        return headers, me.json()["user_id"]

    return _register


@pytest.fixture
def png_upload():
    return {"file": ("card.png", b"\x89PNG\r\n\x1a\n fake png body", "image/png")}
