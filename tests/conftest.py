import os
import uuid

import pytest
import mongomock
from pymongo import MongoClient
from fastapi.testclient import TestClient

from talentlink.db import mongodb
from talentlink.db.mongodb import init_mongo_indexes
from talentlink.main import app

VALID_JOB = {
    "title": "Senior Python Engineer",
    "company": "Acme Corp",
    "location": "Berlin, Germany",
    "type": "Full-time",
    "salary": "EUR 80k - 95k",
    "description": "Build and run the REST services behind our hiring platform, end to end.",
    "requirements": "5+ years of Python and MongoDB experience.",
    "skills": ["Python", "MongoDB", "FastAPI"],
}


@pytest.fixture(scope="function")
def mongo_db(monkeypatch):
    """Swap the application database for an in-memory mongomock one."""
    client = mongomock.MongoClient()
    db = client["talentlink-test"]
    db["users"].create_index("email", unique=True)

    monkeypatch.setattr(mongodb, "_client", client)
    monkeypatch.setattr(mongodb, "_db", db)
    yield db
    client.close()


@pytest.fixture(scope="function")
def live_mongo_db(monkeypatch):
    """
    A throwaway database on a real MongoDB server, with the application indexes.

    mongomock cannot evaluate $text queries, so search tests use this fixture.
    Set TALENTLINK_TEST_MONGODB_URI to run them.
    """
    uri = os.environ.get("TALENTLINK_TEST_MONGODB_URI")
    if not uri:
        pytest.skip("TALENTLINK_TEST_MONGODB_URI is not set")

    client = MongoClient(uri)
    name = f"talentlink-test-{uuid.uuid4().hex[:8]}"
    monkeypatch.setattr(mongodb, "_client", client)
    monkeypatch.setattr(mongodb, "_db", client[name])
    init_mongo_indexes()
    yield client[name]
    client.drop_database(name)
    client.close()


@pytest.fixture(scope="function")
def test_client(mongo_db):
    """Provides a test client bound to the in-memory database."""
    return TestClient(app)


@pytest.fixture
def register_user(test_client):
    """Factory: register a user and return (token, user)."""
    counter = {"n": 0}

    def _register(name: str = None, email: str = None, password: str = "secret1", **extra):
        counter["n"] += 1
        payload = {
            "name": name or f"Test User {counter['n']}",
            "email": email or f"user{counter['n']}@example.com",
            "password": password,
            **extra,
        }
        response = test_client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        body = response.json()
        return body["token"], body["user"]

    return _register


@pytest.fixture
def create_job(test_client):
    """Factory: post a job as ``token`` and return the created job."""

    def _create(token: str, **overrides):
        response = test_client.post(
            "/api/jobs",
            json={**VALID_JOB, **overrides},
            headers=auth(token),
        )
        assert response.status_code == 201, response.text
        return response.json()["job"]

    return _create


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
