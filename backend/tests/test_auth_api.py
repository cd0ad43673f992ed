"""Registration, login, logout and current-user API tests."""

from datetime import datetime, timedelta, timezone

import jwt
from sqlmodel import Session, select

from conftest import auth_headers, register
from simhub.config import settings
from simhub.db import engine
from simhub.models import User


def _user_count():
    with Session(engine) as session:
        return len(session.exec(select(User)).all())


def test_register_returns_user_without_password_hash(client):
    body = register(client, tum_id="ga99zzz")
    assert body["message"] == "User registered successfully"
    assert body["token"]
    user = body["user"]
    assert user["name"] == "Ada"
    assert user["email"] == "ada@x.com"
    assert user["tum_id"] == "ga99zzz"
    assert user["is_tum_verified"] is False
    assert "password_hash" not in user
    assert "password" not in user


def test_register_then_login_with_original_password(client):
    register(client)
    r = client.post("/api/auth/login", json={"email": "ada@x.com", "password": "secret123"})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Login successful"
    assert body["user"]["email"] == "ada@x.com"
    assert "password_hash" not in body["user"]
    me = client.get("/api/auth/me", headers=auth_headers(body["token"]))
    assert me.status_code == 200


def test_duplicate_email_is_conflict_regardless_of_other_fields(client):
    register(client)
    r = client.post(
        "/api/auth/register",
        json={
            "name": "Someone Else",
            "email": "ada@x.com",
            "password": "different-pass",
            "password_confirmation": "different-pass",
        },
    )
    assert r.status_code == 422
    assert r.json()["error"] == "Email already in use"
    assert _user_count() == 1


def test_email_is_stored_case_sensitive(client):
    register(client, email="Ada@X.com")
    body = register(client, email="ada@x.com")
    assert body["user"]["email"] == "ada@x.com"
    assert _user_count() == 2


def test_duplicate_tum_id_is_conflict(client):
    register(client, tum_id="ga12abc")
    r = client.post(
        "/api/auth/register",
        json={
            "name": "Bob",
            "email": "bob@x.com",
            "password": "secret123",
            "password_confirmation": "secret123",
            "tum_id": "ga12abc",
        },
    )
    assert r.status_code == 422
    assert r.json()["error"] == "TUM ID already in use"


def test_password_confirmation_mismatch_creates_nothing(client):
    r = client.post(
        "/api/auth/register",
        json={
            "name": "Ada",
            "email": "ada@x.com",
            "password": "secret123",
            "password_confirmation": "secret124",
        },
    )
    assert r.status_code == 422
    assert "password" in r.json()["errors"]
    assert _user_count() == 0


def test_missing_confirmation_is_validation_error(client):
    r = client.post(
        "/api/auth/register",
        json={"name": "Ada", "email": "ada@x.com", "password": "secret123"},
    )
    assert r.status_code == 422
    assert _user_count() == 0


def test_missing_fields_report_field_errors(client):
    r = client.post("/api/auth/register", json={"password": "secret123", "password_confirmation": "secret123"})
    assert r.status_code == 422
    body = r.json()
    assert body["error"] == "Invalid input"
    assert "name" in body["errors"]
    assert "email" in body["errors"]


def test_weak_password_is_rejected(client):
    r = client.post(
        "/api/auth/register",
        json={"name": "Ada", "email": "ada@x.com", "password": "short", "password_confirmation": "short"},
    )
    assert r.status_code == 422
    assert any("at least" in msg for msg in r.json()["errors"]["password"])
    assert _user_count() == 0


def test_login_failures_share_one_message(client):
    register(client)
    wrong_password = client.post("/api/auth/login", json={"email": "ada@x.com", "password": "nope-nope"})
    unknown_email = client.post("/api/auth/login", json={"email": "nobody@x.com", "password": "secret123"})
    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"error": "Invalid credentials"}


def test_login_requires_email_and_password(client):
    r = client.post("/api/auth/login", json={"email": "ada@x.com"})
    assert r.status_code == 422


def test_me_without_token_is_unauthorized(client):
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}


def test_me_with_garbage_or_wrong_scheme_is_unauthorized(client):
    token = register(client)["token"]
    assert client.get("/api/auth/me", headers=auth_headers("not-a-token")).status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": f"Basic {token}"}).status_code == 401


def test_expired_token_is_unauthorized(client):
    body = register(client)
    past = datetime.now(timezone.utc) - timedelta(days=1)
    expired = jwt.encode(
        {"sub": str(body["user"]["id"]), "email": "ada@x.com", "iat": past - timedelta(days=7), "exp": past},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    r = client.get("/api/auth/me", headers=auth_headers(expired))
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}


def test_token_signed_with_other_secret_is_unauthorized(client):
    body = register(client)
    forged = jwt.encode(
        {"sub": str(body["user"]["id"]), "exp": datetime.now(timezone.utc) + timedelta(days=1)},
        "some-other-secret",
        algorithm="HS256",
    )
    assert client.get("/api/auth/me", headers=auth_headers(forged)).status_code == 401


def test_token_for_deleted_user_is_unauthorized(client):
    body = register(client)
    with Session(engine) as session:
        session.delete(session.get(User, body["user"]["id"]))
        session.commit()
    r = client.get("/api/auth/me", headers=auth_headers(body["token"]))
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}


def test_logout_requires_token_and_leaves_token_usable(client):
    token = register(client)["token"]
    assert client.post("/api/auth/logout").status_code == 401
    r = client.post("/api/auth/logout", headers=auth_headers(token))
    assert r.status_code == 200
    assert r.json() == {"message": "Logout successful"}
    assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 200


def test_wrong_method_is_405(client):
    r = client.get("/api/auth/login")
    assert r.status_code == 405
    assert "error" in r.json()
