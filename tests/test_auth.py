"""
Tests for authentication endpoints: registration, login, refresh, logout, profile.
"""

import pytest
from httpx import AsyncClient

TEST_PASSWORD = "testpassword123"


def _registration(email: str = "new@example.com", **overrides) -> dict:
    body = {"fullName": "New Person", "email": email, "password": "securepassword123"}
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient):
    """Successful registration returns the user and a token pair."""
    response = await client.post("/auth/register", json=_registration())
    assert response.status_code == 201
    data = response.json()
    assert data["user"]["email"] == "new@example.com"
    assert data["user"]["fullName"] == "New Person"
    assert data["user"]["role"] == "USER"
    assert data["accessToken"]
    assert data["refreshToken"]
    assert data["accessToken"] != data["refreshToken"]
    assert "hashedPassword" not in data["user"]  # Never expose password hash
    assert "hashedRefreshToken" not in data["user"]


@pytest.mark.asyncio
async def test_register_cannot_choose_role(client: AsyncClient):
    """Unknown fields such as role are rejected, not silently honoured."""
    response = await client.post("/auth/register", json=_registration(role="ADMIN"))
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, test_user):
    """Duplicate email returns 409."""
    response = await client.post("/auth/register", json=_registration(email="test@example.com"))
    assert response.status_code == 409
    assert response.json() == {
        "statusCode": 409,
        "message": "Email is already registered",
        "error": "Conflict",
    }


@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient):
    """Password under 8 chars is a validation error (400)."""
    response = await client.post("/auth/register", json=_registration(password="short"))
    assert response.status_code == 400
    body = response.json()
    assert body["statusCode"] == 400
    assert body["error"] == "Bad Request"
    assert "password" in body["message"]


@pytest.mark.asyncio
async def test_register_invalid_email(client: AsyncClient):
    response = await client.post("/auth/register", json=_registration(email="not-an-email"))
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, test_user):
    """Valid credentials return a token pair."""
    response = await client.post("/auth/login", json={
        "email": "test@example.com",
        "password": TEST_PASSWORD,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == test_user.id
    assert data["accessToken"]
    assert data["refreshToken"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user):
    """Wrong password returns 401."""
    response = await client.post("/auth/login", json={
        "email": "test@example.com",
        "password": "wrongpassword",
    })
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_unknown_email_same_message(client: AsyncClient, test_user):
    """Unknown email fails exactly like a wrong password."""
    response = await client.post("/auth/login", json={
        "email": "nobody@example.com",
        "password": TEST_PASSWORD,
    })
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_me_returns_profile(client: AsyncClient, test_user, auth_headers):
    response = await client.get("/auth/me", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == test_user.id
    assert data["email"] == "test@example.com"
    assert data["role"] == "USER"


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient):
    response = await client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


@pytest.mark.asyncio
async def test_me_rejects_garbage_token(client: AsyncClient):
    response = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_rotates_tokens(client: AsyncClient):
    """A refresh token works once; the rotated one replaces it."""
    registered = (await client.post("/auth/register", json=_registration())).json()
    old_refresh = registered["refreshToken"]

    response = await client.get(
        "/auth/refresh", headers={"Authorization": f"Bearer {old_refresh}"}
    )
    assert response.status_code == 200
    rotated = response.json()
    assert rotated["refreshToken"] != old_refresh
    assert rotated["user"]["email"] == "new@example.com"

    replay = await client.get(
        "/auth/refresh", headers={"Authorization": f"Bearer {old_refresh}"}
    )
    assert replay.status_code == 401
    assert replay.json()["message"] == "Invalid refresh token"

    again = await client.get(
        "/auth/refresh", headers={"Authorization": f"Bearer {rotated['refreshToken']}"}
    )
    assert again.status_code == 200


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client: AsyncClient):
    registered = (await client.post("/auth/register", json=_registration())).json()
    response = await client.get(
        "/auth/refresh", headers={"Authorization": f"Bearer {registered['accessToken']}"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_token_is_not_an_access_token(client: AsyncClient):
    registered = (await client.post("/auth/register", json=_registration())).json()
    response = await client.get(
        "/auth/me", headers={"Authorization": f"Bearer {registered['refreshToken']}"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_invalidates_refresh_token(client: AsyncClient):
    registered = (await client.post("/auth/register", json=_registration())).json()
    headers = {"Authorization": f"Bearer {registered['accessToken']}"}

    response = await client.post("/auth/logout", headers=headers)
    assert response.status_code == 204

    refresh = await client.get(
        "/auth/refresh", headers={"Authorization": f"Bearer {registered['refreshToken']}"}
    )
    assert refresh.status_code == 401


@pytest.mark.asyncio
async def test_logout_is_idempotent(client: AsyncClient, auth_headers):
    first = await client.post("/auth/logout", headers=auth_headers)
    second = await client.post("/auth/logout", headers=auth_headers)
    assert first.status_code == 204
    assert second.status_code == 204


@pytest.mark.asyncio
async def test_login_after_logout_issues_working_refresh(client: AsyncClient, test_user, auth_headers):
    await client.post("/auth/logout", headers=auth_headers)
    login = (await client.post("/auth/login", json={
        "email": "test@example.com",
        "password": TEST_PASSWORD,
    })).json()
    response = await client.get(
        "/auth/refresh", headers={"Authorization": f"Bearer {login['refreshToken']}"}
    )
    assert response.status_code == 200
