"""Integration tests for the ``/api/v1/auth`` endpoints."""

from __future__ import annotations

import pytest

BASE = "/api/v1/auth"
PASSWORD = "Sup3r$ecret"


def _register(client, email="alice@example.com", **overrides):
    payload = {
        "email": email,
        "password": PASSWORD,
        "first_name": "Alice",
        "last_name": "Liddell",
        **overrides,
    }
    return client.post(f"{BASE}/register", json=payload)


@pytest.fixture()
def registered(client):
    resp = _register(client)
    assert resp.status_code == 201
    return resp.get_json()["data"]


def test_register_returns_account_and_tokens(client):
    resp = _register(client, email="Alice@Example.com")

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["account"]["email"] == "alice@example.com"
    assert data["account"]["role"] == "guest"
    assert data["account"]["is_active"] is True
    assert "password" not in data["account"]
    assert "password_hash" not in data["account"]
    assert data["tokens"]["token_type"] == "bearer"
    assert data["tokens"]["expires_in"] == 15 * 60
    assert data["tokens"]["access_token"]
    assert data["tokens"]["refresh_token"]


def test_register_duplicate_email_conflicts(client, registered):
    resp = _register(client, email="ALICE@example.com")

    assert resp.status_code == 409
    body = resp.get_json()
    assert body["code"] == "conflict"
    assert resp.mimetype == "application/problem+json"


@pytest.mark.parametrize("password", ["short1!", "alllowercase1!", "NoDigits!!", "NoSpecial123"])
def test_register_rejects_weak_passwords(client, password):
    resp = _register(client, password=password)

    assert resp.status_code == 422
    body = resp.get_json()
    assert body["code"] == "validation_error"
    assert "password" in body["details"]["errors"]


def test_register_with_host_role(client):
    resp = _register(client, email="host@example.com", role="host")

    assert resp.status_code == 201
    assert resp.get_json()["data"]["account"]["role"] == "host"


def test_login_success(client, registered):
    resp = client.post(f"{BASE}/login", json={"email": "alice@example.com", "password": PASSWORD})

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["account"]["id"] == registered["account"]["id"]
    assert data["tokens"]["refresh_token"] != registered["tokens"]["refresh_token"]


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "alice@example.com", "password": "Wr0ng!pass"},
        {"email": "nobody@example.com", "password": PASSWORD},
    ],
)
def test_login_failures_are_indistinguishable(client, registered, payload):
    resp = client.post(f"{BASE}/login", json=payload)

    assert resp.status_code == 401
    body = resp.get_json()
    assert body["code"] == "invalid_credentials"
    assert body["detail"] == "Invalid credentials"


def test_refresh_rotates_and_rejects_replay(client, registered):
    old = registered["tokens"]["refresh_token"]

    first = client.post(f"{BASE}/refresh", json={"refresh_token": old})
    replay = client.post(f"{BASE}/refresh", json={"refresh_token": old})

    assert first.status_code == 200
    new = first.get_json()["data"]["refresh_token"]
    assert new != old
    assert replay.status_code == 401
    assert replay.get_json()["code"] == "invalid_refresh_token"

    again = client.post(f"{BASE}/refresh", json={"refresh_token": new})
    assert again.status_code == 200


def test_refresh_unknown_token(client):
    resp = client.post(f"{BASE}/refresh", json={"refresh_token": "not-a-real-token"})

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "invalid_refresh_token"


def test_refresh_blank_token_is_malformed(client):
    resp = client.post(f"{BASE}/refresh", json={"refresh_token": "   "})

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "malformed_token"


def test_refresh_missing_field_is_validation_error(client):
    resp = client.post(f"{BASE}/refresh", json={})

    assert resp.status_code == 422


def test_logout_revokes_refresh_token(client, registered):
    token = registered["tokens"]["refresh_token"]

    resp = client.post(f"{BASE}/logout", json={"refresh_token": token})
    assert resp.status_code == 204

    refreshed = client.post(f"{BASE}/refresh", json={"refresh_token": token})
    assert refreshed.status_code == 401


def test_logout_is_idempotent_for_unknown_tokens(client):
    resp = client.post(f"{BASE}/logout", json={"refresh_token": "never-issued"})

    assert resp.status_code == 204


def test_me_with_bearer_token(client, registered):
    access = registered["tokens"]["access_token"]

    resp = client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {access}"})

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["id"] == registered["account"]["id"]
    assert data["role"] == "guest"
    assert isinstance(data["expires_at"], int)


def test_me_requires_token(client):
    resp = client.get(f"{BASE}/me")

    assert resp.status_code == 401


def test_me_rejects_tampered_token(client, registered):
    access = registered["tokens"]["access_token"]
    tampered = access[:-2] + ("AA" if not access.endswith("AA") else "BB")

    resp = client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {tampered}"})

    assert resp.status_code in (401, 422)


def test_health(client):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "ok"
    assert body["db"] == "ok"
    assert body["refresh_store"] == "sql"


def test_responses_carry_request_id(client):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})

    assert resp.headers["X-Request-ID"] == "req-123"


def test_each_request_adopts_its_own_request_id(client):
    first = client.get("/api/v1/health", headers={"X-Request-ID": "req-a"})
    second = client.get("/api/v1/health", headers={"X-Correlation-ID": "req-b"})
    third = client.get("/api/v1/health")

    assert first.headers["X-Request-ID"] == "req-a"
    assert second.headers["X-Request-ID"] == "req-b"
    assert third.headers["X-Request-ID"] not in {"req-a", "req-b"}
