"""
Shared fixtures: an in-memory Motor-compatible collection, a FeedbackStore
bound to it, and a TestClient whose store dependency points at that store.
"""

import asyncio
import os

# Must be set before app.core.config is imported
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.api import deps
from app.core.security import create_access_token
from app.crud.feedback import FeedbackStore
from app.main import app


@pytest.fixture
def collection():
    client = AsyncMongoMockClient()
    return client["feedback_test"]["feedback"]


@pytest.fixture
def store(collection):
    return FeedbackStore(collection)


@pytest.fixture
def seed(collection):
    """Insert raw documents synchronously (for sync TestClient tests)."""
    def _seed(*docs):
        result = asyncio.run(collection.insert_many([dict(d) for d in docs]))
        return [str(i) for i in result.inserted_ids]

    return _seed


@pytest.fixture
def client(store):
    app.dependency_overrides[deps.get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token = create_access_token("admin@example.com", role="admin")
    return {"Authorization": f"Bearer {token}"}
