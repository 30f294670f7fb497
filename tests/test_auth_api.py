"""Login + current-user API tests.

Learn: Tests cover:
1. Login → token + public user fields
2. Wrong password and unknown email give the identical 401
3. The issued token works against a protected endpoint (/me)
4. Missing, invalid and expired tokens → 401
5. Outdated Argon2 parameters are upgraded on login
"""

from datetime import timedelta

import pytest
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError

import dissipate.auth.password as password_module
from dissipate.auth.jwt import issue_token, verify_token
from dissipate.auth.password import needs_upgrade, verify_password
from dissipate.config import settings
from dissipate.services.user_service import UserService

from conftest import TEST_PASSWORD


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success(unauthenticated_client, user):
    r = await unauthenticated_client.post(
        "/api/login",
        json={"email": user.email, "password": TEST_PASSWORD},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["id"] == user.id
    assert body["user"]["email"] == user.email
    assert body["user"]["username"] == user.username
    assert set(body["user"]) == {"id", "email", "username", "created_at", "updated_at"}
    assert "password_hash" not in body["user"]
    assert verify_token(body["token"], settings.jwt_secret).subject == user.id


@pytest.mark.asyncio
async def test_login_wrong_password(unauthenticated_client, user):
    r = await unauthenticated_client.post(
        "/api/login",
        json={"email": user.email, "password": "wrong_password"},
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid email or password"}


@pytest.mark.asyncio
async def test_login_unknown_email_matches_wrong_password(unauthenticated_client, user):
    """Same status, same body — no account enumeration."""
    wrong_pw = await unauthenticated_client.post(
        "/api/login",
        json={"email": user.email, "password": "wrong_password"},
    )
    unknown = await unauthenticated_client.post(
        "/api/login",
        json={"email": "nobody@example.com", "password": "whatever"},
    )
    assert unknown.status_code == wrong_pw.status_code == 401
    assert unknown.json() == wrong_pw.json()


@pytest.mark.asyncio
async def test_login_missing_fields(unauthenticated_client):
    r = await unauthenticated_client.post("/api/login", json={"email": "x@example.com"})
    assert r.status_code == 422
    assert r.json()["error"] == "Invalid request"


@pytest.mark.asyncio
async def test_login_upgrades_outdated_credential(unauthenticated_client, db_session, user):
    user.password_hash = PasswordHasher(time_cost=2, memory_cost=8200, parallelism=1).hash(
        TEST_PASSWORD
    )
    await db_session.commit()
    assert needs_upgrade(user.password_hash)

    r = await unauthenticated_client.post(
        "/api/login",
        json={"email": user.email, "password": TEST_PASSWORD},
    )
    assert r.status_code == 200

    stored = await UserService(db_session).get_user(user.id)
    assert not needs_upgrade(stored.password_hash)
    assert verify_password(TEST_PASSWORD, stored.password_hash)


@pytest.mark.asyncio
async def test_login_with_corrupt_stored_credential_is_500(unauthenticated_client, db_session, user):
    user.password_hash = "not-an-argon2-hash"
    await db_session.commit()

    r = await unauthenticated_client.post(
        "/api/login",
        json={"email": user.email, "password": TEST_PASSWORD},
    )
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}


@pytest.mark.asyncio
async def test_login_with_lone_surrogate_password(unauthenticated_client, user):
    """"\\ud800" is valid JSON; it must fail like any other wrong password."""
    r = await unauthenticated_client.post(
        "/api/login",
        content=b'{"email": "writer@example.com", "password": "\\ud800"}',
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid email or password"}


@pytest.mark.asyncio
async def test_login_hashing_failure_is_500(unauthenticated_client, user, monkeypatch):
    class BrokenHasher(PasswordHasher):
        def verify(self, hash, password):
            raise VerificationError("out of memory")

    monkeypatch.setattr(password_module, "_hasher", BrokenHasher())

    r = await unauthenticated_client.post(
        "/api/login",
        json={"email": user.email, "password": TEST_PASSWORD},
    )
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}


# ═══════════════════════════════════════════════════════════
# Protected endpoint (/me)
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_login_token(unauthenticated_client, user):
    """Full flow: login → use token → /me returns the user."""
    r = await unauthenticated_client.post(
        "/api/login",
        json={"email": user.email, "password": TEST_PASSWORD},
    )
    token = r.json()["token"]

    r = await unauthenticated_client.get(
        "/api/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert r.status_code == 200
    assert r.json()["email"] == user.email


@pytest.mark.asyncio
async def test_me_without_token(unauthenticated_client):
    r = await unauthenticated_client.get("/api/me")
    assert r.status_code == 401
    assert r.json() == {"error": "Not authenticated"}


@pytest.mark.asyncio
async def test_me_with_invalid_token(unauthenticated_client):
    r = await unauthenticated_client.get(
        "/api/me",
        headers={"Authorization": "Bearer invalid_token_here"},
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_me_with_expired_token(unauthenticated_client, user):
    token = issue_token(user.id, settings.jwt_secret, ttl=timedelta(seconds=-1))
    r = await unauthenticated_client.get(
        "/api/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Not authenticated"}


@pytest.mark.asyncio
async def test_me_for_deleted_account(unauthenticated_client):
    token = issue_token("00000000-0000-0000-0000-000000000000", settings.jwt_secret)
    r = await unauthenticated_client.get(
        "/api/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert r.status_code == 401
