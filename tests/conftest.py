"""Pytest configuration and fixtures.

This file contains shared fixtures that can be used across all tests.

Services are wired with fakes (FakeUnitOfWork, FakePasswordHasher,
FakeSessionStore, FakeNotificationDispatcher, FakeAuditSink) and the real
JWT signer and TOTP manager, so tests run fast without a database or Redis
while still exercising real token and TOTP handling.
"""

import os

# Settings are read when clockwork_auth.main is imported; set them first
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "")

from datetime import UTC, datetime  # noqa: E402

import pytest  # noqa: E402

from clockwork_auth.application.services.auth_config import AuthConfig  # noqa: E402
from clockwork_auth.application.services.auth_service import AuthService  # noqa: E402
from clockwork_auth.application.services.side_effects import SideEffectDispatcher  # noqa: E402
from clockwork_auth.application.services.two_factor import TwoFactorManager  # noqa: E402
from clockwork_auth.domain.entities.principal import Principal  # noqa: E402
from clockwork_auth.infrastructure.security.jwt_token_signer import JWTTokenSigner  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeAuditSink,
    FakeNotificationDispatcher,
    FakePasswordHasher,
    FakeSessionStore,
    FakeUnitOfWork,
)

TEST_SECRET_KEY = "unit-test-secret-key-0123456789abcdef"
STRONG_PASSWORD = "Str0ng!Pass"


@pytest.fixture
def fake_password_hasher() -> FakePasswordHasher:
    """Fast, predictable hasher: hash("x") == "HASHED:x"."""
    return FakePasswordHasher()


@pytest.fixture
def fake_session_store() -> FakeSessionStore:
    return FakeSessionStore()


@pytest.fixture
def fake_notifier() -> FakeNotificationDispatcher:
    return FakeNotificationDispatcher()


@pytest.fixture
def fake_audit_sink() -> FakeAuditSink:
    return FakeAuditSink()


@pytest.fixture
def token_signer() -> JWTTokenSigner:
    return JWTTokenSigner(secret_key=TEST_SECRET_KEY)


@pytest.fixture
def two_factor() -> TwoFactorManager:
    return TwoFactorManager(issuer="ClockWork Platform", valid_window=2)


@pytest.fixture
def side_effects() -> SideEffectDispatcher:
    """Dispatcher without backoff delay; call `await side_effects.drain()` before asserting."""
    return SideEffectDispatcher(max_attempts=3, backoff_seconds=0)


@pytest.fixture
def sample_principal() -> Principal:
    """
    A principal without 2FA.

    The password_hash uses the FakePasswordHasher format, so the plain
    password is STRONG_PASSWORD.
    """
    return Principal(
        id=1,
        email="test@example.com",
        name="Test User",
        password_hash=f"HASHED:{STRONG_PASSWORD}",
        roles=frozenset({"client"}),
        created_at=datetime.now(UTC),
        updated_at=datetime.now(UTC),
    )


@pytest.fixture
def fake_uow(sample_principal) -> FakeUnitOfWork:
    """
    Provide a FakeUnitOfWork pre-populated with sample_principal.

    A fresh instance per test keeps tests isolated.
    """
    return FakeUnitOfWork(initial_principals=[sample_principal])


@pytest.fixture
def auth_service(
    fake_uow,
    token_signer,
    fake_session_store,
    fake_password_hasher,
    fake_notifier,
    fake_audit_sink,
    side_effects,
    two_factor,
) -> AuthService:
    """
    Provide an AuthService with fake dependencies.

    - No database (FakeUnitOfWork)
    - No Redis (FakeSessionStore)
    - No real crypto for passwords (FakePasswordHasher)
    """

    def uow_factory():
        return fake_uow

    return AuthService(
        uow_factory=uow_factory,
        token_signer=token_signer,
        session_store=fake_session_store,
        password_hasher=fake_password_hasher,
        notifier=fake_notifier,
        audit_sink=fake_audit_sink,
        side_effects=side_effects,
        config=AuthConfig(),
        two_factor=two_factor,
    )
