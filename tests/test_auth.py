# tests/test_auth.py

"""
Tests for authentication endpoints.
"""

from fastapi.testclient import TestClient

from core.config import settings


def test_login_success(client: TestClient, accounts):
    response = client.post(
        "/auth/login",
        json={"email": "supervisor-1@pass21.test", "password": "secret"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["access_token"] == "token-supervisor-1"
    assert data["token_type"] == "bearer"
    assert data["user"]["role"] == "SUPERVISOR"


def test_login_invalid_credentials(client: TestClient, accounts):
    response = client.post(
        "/auth/login",
        json={"email": "supervisor-1@pass21.test", "password": "wrongpassword"},
    )

    assert response.status_code == 401
    assert "Invalid email or password" in response.json()["detail"]


def test_login_rate_limiting(client: TestClient, accounts):
    body = {"email": "admin-1@pass21.test", "password": "wrong"}
    for _ in range(settings.LOGIN_RATE_LIMIT):
        assert client.post("/auth/login", json=body).status_code == 401

    response = client.post("/auth/login", json=body)
    assert response.status_code == 429


def test_me_returns_session_user(client: TestClient, headers):
    response = client.get("/auth/me", headers=headers["ADMIN"])
    assert response.status_code == 200
    assert response.json()["id"] == "admin-1"
    assert response.json()["role"] == "ADMIN"


def test_me_requires_valid_token(client: TestClient):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_logout_signs_out_token(client: TestClient, provider, headers):
    response = client.post("/auth/logout", headers=headers["RESIDENT"])
    assert response.status_code == 200
    assert provider.signed_out == ["token-resident-1"]


def test_refresh(client: TestClient, accounts):
    response = client.post("/auth/refresh", json={"refresh_token": "refresh-admin-1"})
    assert response.status_code == 200
    assert response.json()["access_token"] == "token-admin-1"

    assert client.post("/auth/refresh", json={"refresh_token": "bogus"}).status_code == 401


def test_update_password(client: TestClient, provider, headers):
    response = client.post("/auth/update-password", json={"password": "n3w-secret"}, headers=headers["RESIDENT"])
    assert response.status_code == 200
    assert provider.password_updates == [("resident-1", "n3w-secret")]

    assert client.post("/auth/update-password", json={"password": ""}, headers=headers["RESIDENT"]).status_code == 400


def test_password_reset_always_succeeds(client: TestClient, provider):
    def boom(email):
        raise Exception("User not found")

    provider.reset_password_for_email = boom
    response = client.post("/auth/initiate-password-setup", json={"email": "ghost@pass21.test"})
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_password_reset_rate_limiting(client: TestClient, provider):
    for _ in range(settings.PASSWORD_RESET_RATE_LIMIT):
        response = client.post(
            "/auth/initiate-password-setup",
            json={"email": "test@pass21.test"}
        )
        assert response.status_code == 200

    response = client.post(
        "/auth/initiate-password-setup",
        json={"email": "test@pass21.test"}
    )
    assert response.status_code == 429
    assert provider.reset_requests == ["test@pass21.test"] * settings.PASSWORD_RESET_RATE_LIMIT
