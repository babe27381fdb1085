# tests/conftest.py

from __future__ import annotations

from datetime import date, datetime

import pytest
from flask_jwt_extended import create_access_token

from config import TestConfig
from taskflow import create_app
from taskflow.adapters.memory_store import MemoryTaskFlowStore
from taskflow.routes.helpers import get_store

# fixed clock shared by core tests
TODAY = date(2024, 3, 15)
NOW = datetime(2024, 3, 15, 10, 30)


@pytest.fixture()
def store() -> MemoryTaskFlowStore:
    return MemoryTaskFlowStore()


@pytest.fixture()
def demo_user(store):
    return store.create_user(
        {"first_name": "Sarah", "last_name": "Johnson", "email": "sarah@example.com"}
    )


@pytest.fixture()
def app():
    """
    App wired with TestConfig: in-memory SQLite, SQL store, no mock user.
    """
    app = create_app(TestConfig)
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_user(app):
    def _make(email: str = "sarah@example.com", **extra):
        data = {"first_name": "Sarah", "last_name": "Johnson", "email": email}
        data.update(extra)
        return get_store().create_user(data)

    return _make


@pytest.fixture()
def auth_headers(app):
    def _headers(user_id: int) -> dict:
        token = create_access_token(identity=str(user_id))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def user(make_user):
    return make_user()


@pytest.fixture()
def headers(user, auth_headers):
    return auth_headers(user.id)
