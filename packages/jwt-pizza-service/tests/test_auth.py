"""Register / login / logout endpoint tests."""

from __future__ import annotations

import re
from unittest.mock import AsyncMock, patch

import jwt as pyjwt
from _helpers import (
    TOKEN_PATTERN,
    add_user,
    auth,
    create_user_and_login,
    random_name,
)
from fastapi.testclient import TestClient

from jwt_pizza_service.db.repositories.users import UsersRepo
from jwt_pizza_service.rest.app import create_app

# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------


def _register(client, email=None, password="a", name="pizza diner"):
    return client.post(
        "/api/auth",
        json={"name": name, "email": email or f"{random_name()}@test.com", "password": password},
    )


def test_register_returns_user_and_token(client):
    resp = _register(client, email="diner@test.com")
    assert resp.status_code == 200
    data = resp.json()
    assert data["token"]
    assert data["user"]["email"] == "diner@test.com"
    assert data["user"]["name"] == "pizza diner"
    assert [r["role"] for r in data["user"]["roles"]] == ["diner"]
    assert "password" not in data["user"]


def test_register_token_works_immediately(client):
    token = _register(client).json()["token"]
    resp = client.get("/api/user/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200


def test_register_invalid_body_returns_400(client):
    resp = client.post("/api/auth", json={"name": "missing email and password"})
    assert resp.status_code == 400
    assert "email" in resp.json()["message"]


def test_register_duplicate_email_returns_409(client):
    _register(client, email="twice@test.com")
    resp = _register(client, email="twice@test.com")
    assert resp.status_code == 409
    assert resp.json()["message"] == "email already registered"


def test_register_race_on_same_email_returns_409(client):
    _register(client, email="race@test.com")
    # The second request checked before the first one inserted.
    with patch.object(UsersRepo, "get_user_by_email", AsyncMock(return_value=None)):
        resp = _register(client, email="race@test.com")
    assert resp.status_code == 409
    assert resp.json()["message"] == "email already registered"


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


def test_login(client):
    name = random_name()
    email = f"{random_name()}@test.com"
    _register(client, email=email, password="password", name=name)

    resp = client.put("/api/auth", json={"email": email, "password": "password"})
    assert resp.status_code == 200
    data = resp.json()
    assert re.match(TOKEN_PATTERN, data["token"])
    assert data["user"]["name"] == name
    assert data["user"]["email"] == email
    assert data["user"]["roles"] == [{"role": "diner", "franchiseId": None}]


def test_login_token_claims_describe_user(client):
    user = create_user_and_login(client)
    payload = pyjwt.decode(user["token"], options={"verify_signature": False})
    assert payload["sub"] == str(user["id"])
    assert payload["email"] == user["email"]
    assert payload["roles"] == [{"role": "diner", "franchiseId": None}]
    assert "password" not in payload


def test_login_with_invalid_credentials_returns_404(client):
    resp = client.put(
        "/api/auth", json={"email": "nonexistent@test.com", "password": "wrongpassword"}
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "unknown user"


def test_login_wrong_password_returns_404(client):
    user = add_user(client, password="correct")
    resp = client.put("/api/auth", json={"email": user["email"], "password": "wrong"})
    assert resp.status_code == 404
    assert resp.json()["message"] == "unknown user"


def test_each_login_issues_a_distinct_token(client):
    user = add_user(client)
    creds = {"email": user["email"], "password": user["password"]}
    first = client.put("/api/auth", json=creds).json()["token"]
    second = client.put("/api/auth", json=creds).json()["token"]
    assert first != second


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------


def test_logout(client):
    user = create_user_and_login(client)
    resp = client.delete("/api/auth", headers=auth(user))
    assert resp.status_code == 200
    assert resp.json()["message"] == "logout successful"


def test_logged_out_token_is_rejected(client):
    user = create_user_and_login(client)
    client.delete("/api/auth", headers=auth(user))

    resp = client.get("/api/user/me", headers=auth(user))
    assert resp.status_code == 401
    assert resp.json()["message"] == "token revoked"


def test_logout_only_revokes_the_presented_token(client):
    user = add_user(client)
    creds = {"email": user["email"], "password": user["password"]}
    phone = client.put("/api/auth", json=creds).json()["token"]
    laptop = client.put("/api/auth", json=creds).json()["token"]

    client.delete("/api/auth", headers={"Authorization": f"Bearer {phone}"})

    assert client.get("/api/user/me", headers={"Authorization": f"Bearer {laptop}"}).status_code == 200


def test_logout_without_token_returns_401(client):
    resp = client.delete("/api/auth")
    assert resp.status_code == 401
    assert resp.json()["message"] == "unauthorized"


def test_garbage_token_returns_401(client):
    resp = client.get("/api/user/me", headers={"Authorization": "Bearer invalid.token.here"})
    assert resp.status_code == 401


def test_token_signed_with_other_secret_returns_401(client):
    user = create_user_and_login(client)
    payload = pyjwt.decode(user["token"], options={"verify_signature": False})
    forged = pyjwt.encode(payload, "not-the-secret", algorithm="HS256")
    resp = client.get("/api/user/me", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Bootstrap admin
# ---------------------------------------------------------------------------


def test_bootstrap_admin_can_log_in(test_settings, factory):
    settings = test_settings.model_copy(
        update={"bootstrap_admin_email": "a@jwt.com", "bootstrap_admin_password": "admin"}
    )
    with TestClient(create_app(settings, factory_client=factory)) as client:
        resp = client.put("/api/auth", json={"email": "a@jwt.com", "password": "admin"})
        assert resp.status_code == 200
        assert resp.json()["user"]["roles"] == [{"role": "admin", "franchiseId": None}]
