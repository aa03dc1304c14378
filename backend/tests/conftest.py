"""Pytest configuration for DevTerminal.

Settings are read once and cached, so the test database and signing key are
put in the environment before anything from ``devterminal`` is imported.
"""
import os
import tempfile
from pathlib import Path

import pytest

_TEST_DB = Path(tempfile.mkdtemp(prefix="devterminal-tests-")) / "test.db"
os.environ["DEVTERM_DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ["DEVTERM_SECRET_KEY"] = "test-secret-key"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from devterminal.db.base import Base  # noqa: E402
from devterminal.main import app  # noqa: E402

# Plain sqlite3 engine on the same file, for schema resets and direct inspection
_sync_engine = create_engine(f"sqlite:///{_TEST_DB}")


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(_sync_engine)
    Base.metadata.create_all(_sync_engine)
    yield


@pytest.fixture
def db():
    with Session(_sync_engine) as session:
        yield session


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register a user and return ``(user_id, auth_headers)``."""

    def _register(username: str, password: str = "pw"):
        response = client.post("/api/auth/register", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        data = response.json()
        return data["user"]["id"], {"Authorization": f"Bearer {data['token']}"}

    return _register
