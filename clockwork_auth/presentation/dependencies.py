"""FastAPI dependency injection setup.

This module is the COMPOSITION ROOT - where we wire up dependencies.

This is where we decide:
- Use Argon2PasswordHasher (not bcrypt or scrypt)
- Use JWTTokenSigner (PyJWT, HS256)
- Use UnitOfWork with SQLAlchemy for principals
- Use RedisSessionStore when REDIS_URL is set, InMemorySessionStore otherwise
- Use logging-backed notifications and audit trail

All these decisions are isolated here. The application layer doesn't know
or care about these choices - it only knows about interfaces.
"""

from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from clockwork_auth.application.dtos.principal_dto import PrincipalDTO
from clockwork_auth.application.exceptions.exceptions import InvalidTokenError
from clockwork_auth.application.services.auth_service import AuthService
from clockwork_auth.application.services.side_effects import SideEffectDispatcher
from clockwork_auth.domain.repositories.session_store import ISessionStore
from clockwork_auth.domain.repositories.unit_of_work import IUnitOfWork
from clockwork_auth.domain.services.audit_sink import IAuditSink, RequestContext
from clockwork_auth.domain.services.notification_dispatcher import INotificationDispatcher
from clockwork_auth.domain.services.password_hasher import IPasswordHasher
from clockwork_auth.domain.services.token_signer import ITokenSigner
from clockwork_auth.infrastructure.audit.logging_audit_sink import LoggingAuditSink
from clockwork_auth.infrastructure.config.settings import Settings, get_settings
from clockwork_auth.infrastructure.notifications.logging_notifier import (
    LoggingNotificationDispatcher,
)
from clockwork_auth.infrastructure.persistence.database import (
    create_database_engine,
    create_session_factory,
)
from clockwork_auth.infrastructure.repositories.session_store_memory import InMemorySessionStore
from clockwork_auth.infrastructure.repositories.session_store_redis import RedisSessionStore
from clockwork_auth.infrastructure.repositories.unit_of_work_impl import UnitOfWork
from clockwork_auth.infrastructure.security.argon2_password_hasher import Argon2PasswordHasher
from clockwork_auth.infrastructure.security.jwt_token_signer import JWTTokenSigner


# Module-level singletons (created once, reused throughout app lifecycle)
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None
_session_store: ISessionStore | None = None
_side_effects: SideEffectDispatcher | None = None
_password_hasher: IPasswordHasher | None = None


def get_database_engine(settings: Settings = Depends(get_settings)) -> AsyncEngine:
    """Get or create database engine singleton."""
    global _engine
    if _engine is None:
        _engine = create_database_engine(settings)
    return _engine


def get_session_factory(
    engine: AsyncEngine = Depends(get_database_engine),
) -> async_sessionmaker:
    """Get or create session factory singleton."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(engine)
    return _session_factory


def get_session_store(settings: Settings = Depends(get_settings)) -> ISessionStore:
    """
    Dependency that provides the session store.

    This is a SINGLETON - one instance shared across the application.
    Redis is used whenever REDIS_URL is configured; the in-memory store
    only works for a single worker process.

    Note:
        In tests, override with the in-memory store:

        app.dependency_overrides[get_session_store] = lambda: InMemorySessionStore()
    """
    global _session_store
    if _session_store is None:
        if settings.redis_url:
            _session_store = RedisSessionStore.from_url(settings.redis_url)
        else:
            _session_store = InMemorySessionStore()
    return _session_store


def get_side_effect_dispatcher(settings: Settings = Depends(get_settings)) -> SideEffectDispatcher:
    """Background dispatcher singleton (drained on application shutdown)."""
    global _side_effects
    if _side_effects is None:
        _side_effects = SideEffectDispatcher(
            max_attempts=settings.side_effect_max_attempts,
            backoff_seconds=settings.side_effect_backoff_seconds,
        )
    return _side_effects


def get_password_hasher() -> IPasswordHasher:
    """
    Dependency that provides password hasher.

    This is a SINGLETON - password hashers are stateless and thread-safe.

    Note:
        In tests, this dependency can be overridden with FakePasswordHasher:

        app.dependency_overrides[get_password_hasher] = lambda: FakePasswordHasher()
    """
    global _password_hasher
    if _password_hasher is None:
        _password_hasher = Argon2PasswordHasher()
    return _password_hasher


def get_token_signer(settings: Settings = Depends(get_settings)) -> ITokenSigner:
    """JWT signer configured from settings (raises ValueError on a short key)."""
    return JWTTokenSigner(secret_key=settings.secret_key, algorithm=settings.algorithm)


def get_notifier() -> INotificationDispatcher:
    return LoggingNotificationDispatcher()


def get_audit_sink() -> IAuditSink:
    return LoggingAuditSink()


def get_auth_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    token_signer: ITokenSigner = Depends(get_token_signer),
    session_store: ISessionStore = Depends(get_session_store),
    password_hasher: IPasswordHasher = Depends(get_password_hasher),
    notifier: INotificationDispatcher = Depends(get_notifier),
    audit_sink: IAuditSink = Depends(get_audit_sink),
    side_effects: SideEffectDispatcher = Depends(get_side_effect_dispatcher),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    """
    Dependency that provides AuthService.

    Dependency Graph:
        FastAPI endpoint
            → get_auth_service()
                → get_session_factory() → get_database_engine() → Settings
                → get_token_signer() → Settings
                → get_session_store() → Settings (Redis or in-memory)
                → get_password_hasher() → Argon2PasswordHasher
                → get_notifier(), get_audit_sink() → logging
                → get_side_effect_dispatcher() → Settings
    """

    def uow_factory() -> IUnitOfWork:
        return UnitOfWork(session_factory)

    return AuthService(
        uow_factory=uow_factory,
        token_signer=token_signer,
        session_store=session_store,
        password_hasher=password_hasher,
        notifier=notifier,
        audit_sink=audit_sink,
        side_effects=side_effects,
        config=settings.auth_config(),
    )


def get_request_context(request: Request) -> RequestContext:
    """Caller IP and user agent for the audit trail."""
    return RequestContext(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


# Create security scheme for JWT Bearer tokens
# auto_error=False allows us to return 401 instead of 403 when credentials are missing
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentPrincipal:
    """Authenticated caller: the principal plus the access token it presented."""

    principal: PrincipalDTO
    access_token: str


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> CurrentPrincipal:
    """
    Dependency that extracts and validates the current principal from the bearer token.

    Usage in endpoints:
        @router.get("/me")
        async def get_me(current: CurrentPrincipal = Depends(get_current_principal)):
            return current.principal

    Raises:
        InvalidTokenError: Missing or malformed token
        TokenExpiredError / TokenRevokedError: Expired or logged-out token
    """
    if credentials is None:
        raise InvalidTokenError("Missing authorization credentials")

    principal = await auth_service.get_current_principal(credentials.credentials)
    return CurrentPrincipal(principal=principal, access_token=credentials.credentials)


async def shutdown_dependencies() -> None:
    """Drain background side effects and release pooled connections."""
    global _engine, _session_factory, _session_store, _side_effects
    if _side_effects is not None:
        await _side_effects.drain(timeout=10)
        _side_effects = None
    if isinstance(_session_store, RedisSessionStore):
        await _session_store.close()
    _session_store = None
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
