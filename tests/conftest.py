"""
Pytest configuration and shared fixtures
"""

import itertools
import os

# Settings are read on first use; point them at an in-memory database first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["API_LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from crudsuite.api.config import reset_settings
from crudsuite.api.dependencies import get_db_engine, get_session_factory, reset_db_engine
from crudsuite.db import Base

PASSWORD = "Passw0rd!"


@pytest.fixture
def engine():
    """Fresh in-memory schema per test."""
    reset_settings()
    reset_db_engine()
    engine = get_db_engine()
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    reset_db_engine()


@pytest.fixture
def db_session(engine):
    """Session on the same connection the app uses, for arranging state directly."""
    session = get_session_factory()()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    from crudsuite.api.main import create_app

    return TestClient(create_app())


@pytest.fixture
def register(client):
    """
    Join an account and return the Authorized body plus ready-made headers.

    Usage:
        member = register("/todo/member")
        client.get("/todo/member/todos/...", headers=member["headers"])
    """
    counter = itertools.count(1)

    def _register(path: str, **fields):
        n = next(counter)
        payload = {"email": f"user{n}@example.com", "password": PASSWORD, "username": f"user{n}"}
        payload.update(fields)
        response = client.post(f"/auth{path}/join", json=payload)
        assert response.status_code == 201, response.text
        body = response.json()
        body["headers"] = {"Authorization": f"Bearer {body['token']['access']}"}
        return body

    return _register
