"""Shared pytest fixtures: isolated database, cheap hashing, mock identity."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./data/test.db")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from simhub import models  # noqa: E402,F401
from simhub.config import settings  # noqa: E402
from simhub.db import engine  # noqa: E402
from simhub.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    original_mode = settings.identity_mode
    original_accounts = settings.mock_identity_accounts
    settings.identity_mode = "mock"
    settings.mock_identity_accounts = {"ga12abc": "campus-pass"}
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield
    settings.identity_mode = original_mode
    settings.mock_identity_accounts = original_accounts
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def register(client, name="Ada", email="ada@x.com", password="secret123", **extra):
    payload = {
        "name": name,
        "email": email,
        "password": password,
        "password_confirmation": password,
        **extra,
    }
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
