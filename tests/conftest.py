from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from zip_factory import FakeStorage

import colaboradores_docs.data.db as app_db
from colaboradores_docs.api.dependencies import get_storage_client
from colaboradores_docs.api.main import app
from colaboradores_docs.data.db import init_db
from colaboradores_docs.services.auth import create_user


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def api_db(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Use a temporary SQLite DB for API tests."""
    db_path = tmp_path / "api.db"
    monkeypatch.setenv("DB_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.setenv("STORAGE_API_TOKEN", "test-token")
    app_db.reset_engine()
    init_db()
    yield
    # Dispose engine to release connections
    app_db.reset_engine()


@pytest.fixture
def client(api_db: None, fake_storage: FakeStorage) -> Iterator[TestClient]:
    """Test client whose storage dependency is the in-memory fake."""
    app.dependency_overrides[get_storage_client] = lambda: fake_storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def staff_headers(api_db: None) -> dict[str, dict[str, str]]:
    """Register one user per permission level and return their request headers."""
    headers = {}
    for username, permissao in (
        ("admin", "Admin"),
        ("editor", "Editor"),
        ("viewer", "Visualizador"),
    ):
        created, error = create_user(username, "secret", permissao=permissao)
        assert created, error
        headers[permissao] = {"X-Username": username}
    return headers


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Automatically add api_db fixture to tests in API test files."""
    for item in items:
        test_file_path = Path(str(item.fspath))
        if "api" in test_file_path.stem.lower():
            item.add_marker(pytest.mark.usefixtures("api_db"))
