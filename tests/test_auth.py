from datetime import timedelta

import jwt
import pytest
from fastapi import HTTPException

from src import app
from src.config import Config
from src.utils.auth import (
    create_token,
    decode_token,
    generate_password_hash,
    get_current_user,
    verify_password_hash,
)


def test_password_hash_roundtrip():
    hashed = generate_password_hash("hunter22")

    assert hashed != "hunter22"
    assert verify_password_hash("hunter22", hashed)
    assert not verify_password_hash("hunter23", hashed)


def test_access_token_carries_subject_and_type():
    token = create_token({"user_id": "abc", "username": "owner"}, timedelta(minutes=5), type="access")

    payload = decode_token(token)

    assert payload["sub"] == "abc"
    assert payload["type"] == "access"
    assert payload["username"] == "owner"


def test_expired_token_is_rejected():
    token = create_token({"user_id": "abc"}, timedelta(minutes=-5), type="access")

    with pytest.raises(HTTPException) as exc_info:
        decode_token(token)

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Token has expired"


def test_token_signed_with_other_key_is_rejected():
    token = jwt.encode({"sub": "abc", "type": "access"}, "wrong-key", algorithm=Config.JWT_ALGORITHM)

    with pytest.raises(HTTPException) as exc_info:
        decode_token(token)

    assert exc_info.value.status_code == 401


class TestProtectedRoutes:

    @pytest.fixture
    def anonymous(self, client):
        app.dependency_overrides.pop(get_current_user, None)
        return client

    @pytest.mark.parametrize("path", [
        "/api/customers",
        "/api/sales",
        "/api/expenses",
        "/api/stats/dashboard",
        "/api/daily-summaries",
    ])
    async def test_missing_credentials_is_401(self, anonymous, path):
        response = await anonymous.get(path)

        assert response.status_code == 401
        assert response.json()["success"] is False

    async def test_garbage_bearer_token_is_401(self, anonymous):
        response = await anonymous.get(
            "/api/sales", headers={"Authorization": "Bearer not.a.token"}
        )

        assert response.status_code == 401

    async def test_unauthenticated_write_does_not_touch_the_ledger(self, anonymous, user, get_summary):
        response = await anonymous.post("/api/sales", json={
            "date": "2024-05-01", "product": "Tea", "price": "1.00", "total": "1.00",
        })

        assert response.status_code == 401
        assert await get_summary(user, "2024-05-01") is None

    async def test_token_for_deleted_user_is_401(self, client, login_as, session, other_user):
        await session.delete(other_user)
        await session.commit()
        login_as(other_user)

        response = await client.get("/api/sales")

        assert response.status_code == 401


class TestLogin:

    async def test_returns_tokens_in_body_and_cookies(self, client, user):
        response = await client.post("/api/auth/login", json={"username": "Owner", "password": "secret-pass"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert decode_token(data["access_token"])["sub"] == str(user.user_id)
        assert "password_hash" not in data
        assert "access_token" in response.cookies

    async def test_wrong_password_is_400(self, client, user):
        response = await client.post("/api/auth/login", json={"username": "owner", "password": "nope"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid Credentials"

    async def test_me_returns_current_user(self, client, user):
        response = await client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json()["data"]["username"] == "owner"
