# tests/conftest.py

from __future__ import annotations

import os

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.database.supabase_client import get_supabase
from app.main import app
from app.modules.auth import service as auth_service

from fakes import FakeSupabase

# well-formed uuid that no row uses
MISSING_ID = "00000000-0000-4000-8000-000000000000"


@pytest.fixture()
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture()
def client(db: FakeSupabase):
    """
    TestClient with the Supabase client swapped for the in-memory fake.

    The token cache in the auth service is module level, so it is cleared
    around every test.
    """
    auth_service._AUTH_USER_CACHE.clear()
    app.dependency_overrides[get_supabase] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    auth_service._AUTH_USER_CACHE.clear()


def signup(client: TestClient, name: str, email: str, password: str = "secret123") -> SimpleNamespace:
    """Register and log in; returns the user id and ready-to-use auth headers."""
    registered = client.post("/api/v1/auth/register", json={"name": name, "email": email, "password": password})
    assert registered.status_code == 201, registered.text
    login = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert login.status_code == 200, login.text
    body = login.json()
    return SimpleNamespace(
        id=body["user_id"],
        email=email.lower(),
        name=name,
        headers={"Authorization": f"Bearer {body['access_token']}"},
    )


@pytest.fixture()
def alice(client: TestClient) -> SimpleNamespace:
    return signup(client, "Alice", "alice@example.com")


@pytest.fixture()
def bob(client: TestClient) -> SimpleNamespace:
    return signup(client, "Bob", "bob@example.com")


@pytest.fixture()
def admin(client: TestClient, db: FakeSupabase) -> SimpleNamespace:
    user = signup(client, "Admin User", "admin@example.com")
    for profile in db.tables["user_profiles"]:
        if profile["id"] == user.id:
            profile["role"] = "admin"
    return user


@pytest.fixture()
def household(client: TestClient, alice: SimpleNamespace) -> dict:
    """A household owned by alice."""
    response = client.post(
        "/api/v1/households",
        json={"name": "Smith Family Home", "number_of_rooms": 4, "house_type": "house"},
        headers=alice.headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def owner_member_id(client: TestClient, household: dict, user: SimpleNamespace) -> str:
    members = client.get(f"/api/v1/households/{household['id']}/members", headers=user.headers).json()
    return next(m["id"] for m in members if m["user_id"] == user.id)


def add_member(client: TestClient, household: dict, owner: SimpleNamespace, **fields) -> dict:
    response = client.post(f"/api/v1/households/{household['id']}/members", json=fields, headers=owner.headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_task(client: TestClient, household: dict, user: SimpleNamespace, **fields) -> dict:
    payload = {"household_id": household["id"], "title": "Clean the kitchen", **fields}
    response = client.post("/api/v1/tasks", json=payload, headers=user.headers)
    assert response.status_code == 201, response.text
    return response.json()
