"""Shared fixtures: an in-memory MongoDB (mongomock) and an app wired to it."""

import mongomock
import pytest
from fastapi.testclient import TestClient

from em_diary import config
from em_diary.main import create_app
from em_diary.store import MongoStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def mongo_db():
    """Create a mock MongoDB database for testing."""
    client = mongomock.MongoClient()
    return client["em_diary_test"]


@pytest.fixture
def store(mongo_db) -> MongoStore:
    return MongoStore.from_database(mongo_db)


@pytest.fixture
def member_doc():
    return {
        "name": "John Doe",
        "role": "Developer",
        "birthday": "1990-01-01",
        "hiringDate": "2020-01-01",
        "location": "New York, NY",
    }


@pytest.fixture
def demo_mode(monkeypatch):
    monkeypatch.setattr(config, "DEMO_MODE", True)


@pytest.fixture
def client(store, demo_mode) -> TestClient:
    """Signed-in (demo mode) client against the mongomock store."""
    return TestClient(create_app(store))
