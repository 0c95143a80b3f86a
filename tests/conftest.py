"""Shared fixtures: an in-memory database per test and an API client bound to it."""

from __future__ import annotations

import os

os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from finance_tracker.db.core import get_db, init_db
from finance_tracker.main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_user(client: TestClient, username: str) -> dict:
    response = client.post("/users/", json={"email": f"{username}@example.com", "username": username})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def user(client) -> dict:
    return _create_user(client, "alice")


@pytest.fixture
def headers(user) -> dict:
    return {"X-User-Id": str(user["db_id"])}


@pytest.fixture
def other_headers(client) -> dict:
    return {"X-User-Id": str(_create_user(client, "bob")["db_id"])}


@pytest.fixture
def category_ids(client, headers) -> dict:
    """Default category name -> id for the main test user."""
    response = client.get("/categories/", headers=headers)
    return {c["name"]: c["id"] for c in response.json()}


@pytest.fixture
def add_transaction(client, headers):
    def _add(amount, transaction_date, transaction_type="EXPENSE", description="Test entry",
             category_id=None, request_headers=None):
        payload = {
            "amount": str(amount),
            "transaction_date": str(transaction_date),
            "transaction_type": transaction_type,
            "description": description,
            "category_id": category_id,
        }
        response = client.post("/transactions/", json=payload, headers=request_headers or headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _add
