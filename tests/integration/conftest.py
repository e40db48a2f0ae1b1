"""
Integration test configuration
"""
import pytest
from fastapi.testclient import TestClient

from src.app.main import app
from src.api.deps import get_db, get_storage


@pytest.fixture
def client(db_session, storage):
    """FastAPI test client with dependency overrides."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    test_client = TestClient(app, raise_server_exceptions=False)
    yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def owner_headers():
    return {"X-User-Id": "100"}


@pytest.fixture
def uploader_headers():
    return {"X-User-Id": "200"}


@pytest.fixture
def admin_headers():
    return {"X-User-Id": "999", "X-User-Role": "admin"}
