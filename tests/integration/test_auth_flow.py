"""Integration tests for the authentication HTTP API.

Tests the complete flows with a real database, real Argon2 hashing and
real JWT signing:
1. Signup -> Login -> Access protected endpoint -> Logout
2. Token refresh rotation
3. Password reset
4. Two-factor enrollment and login
5. Error mapping (validation, conflicts, storage outages)
"""

import pyotp
import pytest
from httpx import AsyncClient

from clockwork_auth.main import app
from clockwork_auth.presentation.dependencies import get_session_store
from tests.conftest import STRONG_PASSWORD
from tests.fakes import FakeSessionStore

pytestmark = pytest.mark.integration

API = "/api/v1/auth"


async def signup(client: AsyncClient, email: str = "test@example.com", **extra) -> dict:
    response = await client.post(
        f"{API}/signup",
        json={"email": email, "password": STRONG_PASSWORD, "name": "Test User", **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# === SIGNUP / LOGIN ===


@pytest.mark.asyncio
async def test_complete_auth_flow(client: AsyncClient):
    """Signup -> login -> /me -> logout -> token rejected."""
    # Step 1: Sign up
    created = await signup(client)
    assert created["principal"]["email"] == "test@example.com"
    assert created["principal"]["roles"] == ["client"]
    assert created["tokens"]["token_type"] == "bearer"

    # Step 2: Login
    login = await client.post(f"{API}/login", json={"email": "test@example.com", "password": STRONG_PASSWORD})
    assert login.status_code == 200
    body = login.json()
    assert body["status"] == "authenticated"
    access_token = body["tokens"]["access_token"]

    # Step 3: Protected endpoint
    me = await client.get(f"{API}/me", headers=bearer(access_token))
    assert me.status_code == 200
    assert me.json()["id"] == created["principal"]["id"]

    # Step 4: Logout revokes the access token
    logout = await client.post(f"{API}/logout", headers=bearer(access_token))
    assert logout.status_code == 200
    assert logout.json()["message"] == "Logged out successfully"

    revoked = await client.get(f"{API}/me", headers=bearer(access_token))
    assert revoked.status_code == 401
    assert revoked.json()["error_code"] == "TOKEN_REVOKED"


@pytest.mark.asyncio
async def test_signup_duplicate_email_is_conflict(client: AsyncClient):
    await signup(client, email="dup@example.com")

    response = await client.post(
        f"{API}/signup",
        json={"email": "DUP@example.com", "password": STRONG_PASSWORD, "name": "Other"},
    )

    assert response.status_code == 409
    assert response.json()["error_code"] == "EMAIL_ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_signup_validation_lists_every_rule(client: AsyncClient):
    response = await client.post(
        f"{API}/signup",
        json={"email": "nope", "password": "short", "name": "X"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "VALIDATION_FAILED"
    assert len(body["errors"]) >= 4


@pytest.mark.asyncio
async def test_signup_missing_field_is_request_validation_error(client: AsyncClient):
    response = await client.post(f"{API}/signup", json={"email": "a@b.com"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_failures_are_identical(client: AsyncClient):
    await signup(client)

    wrong = await client.post(f"{API}/login", json={"email": "test@example.com", "password": "Wr0ng!Pass"})
    unknown = await client.post(f"{API}/login", json={"email": "nobody@example.com", "password": "Wr0ng!Pass"})

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()


@pytest.mark.asyncio
async def test_me_without_token(client: AsyncClient):
    response = await client.get(f"{API}/me")

    assert response.status_code == 401
    assert response.json()["error_code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_me_with_invalid_token(client: AsyncClient):
    response = await client.get(f"{API}/me", headers=bearer("invalid.token.here"))

    assert response.status_code == 401


# === REFRESH ===


@pytest.mark.asyncio
async def test_token_refresh_rotation(client: AsyncClient):
    tokens = (await signup(client))["tokens"]

    first = await client.post(f"{API}/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert first.status_code == 200
    new_tokens = first.json()
    assert new_tokens["refresh_token"] != tokens["refresh_token"]

    replay = await client.post(f"{API}/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert replay.status_code == 401
    assert replay.json()["error_code"] == "INVALID_OR_EXPIRED_TOKEN"

    me = await client.get(f"{API}/me", headers=bearer(new_tokens["access_token"]))
    assert me.status_code == 200


@pytest.mark.asyncio
async def test_refresh_with_invalid_token(client: AsyncClient):
    response = await client.post(f"{API}/refresh", json={"refresh_token": "invalid.token.here"})

    assert response.status_code == 401


# === PASSWORD RESET ===


@pytest.mark.asyncio
async def test_password_reset_flow(client: AsyncClient, notifier, dispatcher):
    # Arrange
    await signup(client)

    # Act: request for known and unknown addresses
    known = await client.post(f"{API}/password-reset/request", json={"email": "test@example.com"})
    unknown = await client.post(f"{API}/password-reset/request", json={"email": "ghost@example.com"})
    await dispatcher.drain()

    # Assert: indistinguishable replies, one notification
    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    token = notifier.last_reset_token()
    assert token is not None

    weak = await client.post(f"{API}/password-reset/confirm", json={"token": token, "new_password": "weak"})
    assert weak.status_code == 400

    confirm = await client.post(
        f"{API}/password-reset/confirm", json={"token": token, "new_password": "N3w!Secret"}
    )
    assert confirm.status_code == 200

    reuse = await client.post(
        f"{API}/password-reset/confirm", json={"token": token, "new_password": "An0ther!Secret"}
    )
    assert reuse.status_code == 401

    login = await client.post(f"{API}/login", json={"email": "test@example.com", "password": "N3w!Secret"})
    assert login.status_code == 200


# === TWO-FACTOR ===


@pytest.mark.asyncio
async def test_two_factor_enrollment_and_login(client: AsyncClient):
    # Step 1: Enroll
    access_token = (await signup(client, email="a@b.com"))["tokens"]["access_token"]
    setup = await client.post(f"{API}/2fa/enable", headers=bearer(access_token))
    assert setup.status_code == 200
    secret = setup.json()["secret"]
    assert setup.json()["provisioning_uri"].startswith("otpauth://totp/")

    confirm = await client.post(
        f"{API}/2fa/confirm", json={"code": pyotp.TOTP(secret).now()}, headers=bearer(access_token)
    )
    assert confirm.status_code == 200
    backup_codes = confirm.json()["backup_codes"]
    assert len(backup_codes) == 8

    again = await client.post(f"{API}/2fa/enable", headers=bearer(access_token))
    assert again.status_code == 400
    assert again.json()["error_code"] == "TWO_FACTOR_ALREADY_ENABLED"

    # Step 2: Password login stops at the second factor
    login = await client.post(f"{API}/login", json={"email": "a@b.com", "password": STRONG_PASSWORD})
    body = login.json()
    assert body["status"] == "two_factor_pending"
    assert body["tokens"] is None
    challenge = body["challenge_token"]

    bad = await client.post(f"{API}/2fa/verify", json={"challenge_token": challenge, "code": "ZZZZZZZZ"})
    assert bad.status_code == 401
    assert bad.json()["error_code"] == "INVALID_CODE"

    # Step 3: A backup code completes the login once
    ok = await client.post(f"{API}/2fa/verify", json={"challenge_token": challenge, "code": backup_codes[0]})
    assert ok.status_code == 200
    assert ok.json()["status"] == "authenticated"
    new_access = ok.json()["tokens"]["access_token"]

    replay = await client.post(f"{API}/2fa/verify", json={"challenge_token": challenge, "code": backup_codes[1]})
    assert replay.status_code == 401

    # Step 4: Disable with the password
    wrong = await client.post(f"{API}/2fa/disable", json={"password": "Wr0ng!Pass"}, headers=bearer(new_access))
    assert wrong.status_code == 401
    disable = await client.post(
        f"{API}/2fa/disable", json={"password": STRONG_PASSWORD}, headers=bearer(new_access)
    )
    assert disable.status_code == 200

    plain = await client.post(f"{API}/login", json={"email": "a@b.com", "password": STRONG_PASSWORD})
    assert plain.json()["status"] == "authenticated"


@pytest.mark.asyncio
async def test_confirm_without_pending_setup(client: AsyncClient):
    access_token = (await signup(client))["tokens"]["access_token"]

    response = await client.post(f"{API}/2fa/confirm", json={"code": "123456"}, headers=bearer(access_token))

    assert response.status_code == 400
    assert response.json()["error_code"] == "NO_PENDING_TWO_FACTOR_SETUP"


# === STORAGE FAILURES ===


@pytest.mark.asyncio
async def test_session_store_outage_is_503(client: AsyncClient):
    # Arrange
    await signup(client)
    broken = FakeSessionStore()
    broken.unavailable = True
    app.dependency_overrides[get_session_store] = lambda: broken

    # Act
    response = await client.post(f"{API}/login", json={"email": "test@example.com", "password": STRONG_PASSWORD})

    # Assert
    assert response.status_code == 503
    assert response.json()["error_code"] == "STORAGE_FAILURE"


@pytest.mark.asyncio
async def test_root_and_config(client: AsyncClient):
    root = await client.get("/")
    config = await client.get("/config")

    assert root.status_code == 200
    assert root.json()["status"] == "running"
    assert config.json()["session_store"] == "memory"
    assert "secret_key" not in config.json()
