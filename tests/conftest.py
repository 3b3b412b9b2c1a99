"""Pytest configuration and fixtures."""
import os

# Must be set before toolhub.settings is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PREFERENCES_BACKEND"] = "database"
os.environ["LOG_FORMAT"] = "text"

import pytest
from fastapi.testclient import TestClient

from toolhub.db import Base, SessionLocal, engine
from toolhub.main import app
from toolhub.schemas.catalog import Tool
from toolhub.services.catalog import CatalogStore
from toolhub.services.persistence import DatabaseBackend, InMemoryBackend
from toolhub.services.preferences import PreferenceStore

import toolhub.models  # noqa: F401  (registers tables on Base.metadata)


def _build_tool(tool_id: int, **overrides) -> Tool:
    """Build a catalog tool with neutral defaults (no flags, paid pricing)."""
    data = {
        "id": tool_id,
        "name": f"Tool {tool_id}",
        "description": f"Description of tool {tool_id}",
        "category": "Development",
        "rating": 4.0,
        "reviews": 100,
        "pricing": "Subscription",
        "tags": [],
    }
    data.update(overrides)
    return Tool.model_validate(data)


@pytest.fixture
def make_tool():
    """Factory for synthetic catalog tools."""
    return _build_tool


@pytest.fixture
def catalog():
    """The packaged catalog."""
    return CatalogStore.from_file()


@pytest.fixture
def backend():
    """In-memory key-value backend."""
    return InMemoryBackend()


@pytest.fixture
def store(backend):
    """Preference store over the in-memory backend."""
    return PreferenceStore(backend)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh tables and a database session for each test."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_backend(db_session):
    """Key-value backend over the test database."""
    return DatabaseBackend(SessionLocal)


@pytest.fixture(scope="function")
def client():
    """Create a test client; startup builds the services against the test database."""
    with TestClient(app) as test_client:
        yield test_client
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def user_headers():
    """Headers identifying a signed-in user."""
    return {"X-User-Id": "user-1"}
