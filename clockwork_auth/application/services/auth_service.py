"""Authentication service - application layer business logic.

This service is the only entry point to the authentication subsystem.
It moves a principal through the login state machine:

    Unauthenticated -> CredentialsVerified -> Authenticated
                                           -> TwoFactorPending -> Authenticated

Any step may end in rejection: bad credentials, a bad or expired second
factor, or a storage failure. Beyond login it handles signup, logout,
refresh rotation, password reset and 2FA enrollment.

DEPENDENCY INVERSION in action:
- AuthService depends on ITokenSigner, ISessionStore, IPasswordHasher
- AuthService depends on IUnitOfWork, INotificationDispatcher, IAuditSink
- No dependencies on PyJWT, Argon2, Redis or SQLAlchemy

Notifications and audit records never fail an operation: they are handed
to the SideEffectDispatcher after the operation's own writes succeeded.
"""

import functools
import json
import logging
import time
from collections.abc import Callable, Sequence

from clockwork_auth.application.dtos.auth_dto import (
    AcknowledgementDTO,
    AuthenticatedDTO,
    BackupCodesDTO,
    ConfirmTwoFactorDTO,
    DisableTwoFactorDTO,
    LoginDTO,
    LoginResultDTO,
    PasswordResetConfirmDTO,
    PasswordResetRequestDTO,
    RefreshTokenDTO,
    SignupDTO,
    TokenPairDTO,
    TwoFactorSetupDTO,
    VerifyTwoFactorDTO,
)
from clockwork_auth.application.dtos.principal_dto import PrincipalDTO
from clockwork_auth.application.exceptions.exceptions import (
    AlreadyEnabledError,
    ConflictError,
    InvalidCodeError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    NoPendingSetupError,
    PrincipalNotFoundError,
    StorageFailureError,
    ValidationFailedError,
)
from clockwork_auth.application.services.auth_config import AuthConfig
from clockwork_auth.application.services.one_time_token import OneTimeTokenFlow
from clockwork_auth.application.services.side_effects import SideEffectDispatcher
from clockwork_auth.application.services.token_service import TokenPair, TokenService
from clockwork_auth.application.services.two_factor import TwoFactorManager
from clockwork_auth.application.services.validation import check_email, check_password, password_violations
from clockwork_auth.domain.entities.principal import Principal, normalize_email
from clockwork_auth.domain.exceptions import EmailAlreadyRegisteredException, SessionStoreUnavailableException
from clockwork_auth.domain.repositories.session_store import ISessionStore
from clockwork_auth.domain.repositories.unit_of_work import IUnitOfWork
from clockwork_auth.domain.services.account_provisioner import IAccountProvisioner
from clockwork_auth.domain.services.audit_sink import AuditAction, IAuditSink, RequestContext
from clockwork_auth.domain.services.notification_dispatcher import INotificationDispatcher
from clockwork_auth.domain.services.password_hasher import IPasswordHasher
from clockwork_auth.domain.services.token_signer import ITokenSigner

logger = logging.getLogger(__name__)

RESET_ACKNOWLEDGEMENT = (
    "If an account exists with this email, you will receive a password reset link."
)
ACCOUNT_LABEL = "ClockWork ({email})"


def _storage_guard(method):
    """Surface session-store outages as StorageFailureError."""

    @functools.wraps(method)
    async def wrapper(*args, **kwargs):
        try:
            return await method(*args, **kwargs)
        except SessionStoreUnavailableException as e:
            logger.error(f"Session store unavailable during {method.__name__}: {e.message}")
            raise StorageFailureError() from e

    return wrapper


def backup_codes_key(subject_id: int) -> str:
    return f"2fa_backup:{subject_id}"


class AuthService:
    """
    Authentication orchestrator encapsulating all auth-related use cases.

    This service:
    1. Depends on abstractions only
    2. Owns the login state machine and every credential mutation
    3. Returns DTOs to the presentation layer
    4. Raises application exceptions (converted to HTTP by presentation)

    Testing:
    - Unit tests use FakeUnitOfWork, FakePasswordHasher, FakeSessionStore,
      FakeNotificationDispatcher and FakeAuditSink with the real JWT signer
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        token_signer: ITokenSigner,
        session_store: ISessionStore,
        password_hasher: IPasswordHasher,
        notifier: INotificationDispatcher,
        audit_sink: IAuditSink,
        side_effects: SideEffectDispatcher,
        config: AuthConfig | None = None,
        two_factor: TwoFactorManager | None = None,
        provisioners: Sequence[IAccountProvisioner] = (),
    ):
        """
        Initialize auth service with dependencies.

        Args:
            uow_factory: Factory function that returns IUnitOfWork instances
            token_signer: Signs every token kind (abstraction)
            session_store: TTL store for sessions, blacklist and one-time tokens
            password_hasher: Password hashing service (abstraction)
            notifier: Outbound account notifications
            audit_sink: Audit trail
            side_effects: Background runner for notifier and audit calls
            config: Lifetimes, TOTP parameters and password policy
            two_factor: TOTP manager (built from config when omitted)
            provisioners: Domain-default record creators run at signup
        """
        self._config = config or AuthConfig()
        self._uow_factory = uow_factory
        self._store = session_store
        self._password_hasher = password_hasher
        self._notifier = notifier
        self._audit_sink = audit_sink
        self._side_effects = side_effects
        self._provisioners = list(provisioners)
        self._dummy_password_hash: str | None = None
        self._two_factor = two_factor or TwoFactorManager(
            issuer=self._config.totp_issuer,
            valid_window=self._config.totp_valid_window,
        )
        self._tokens = TokenService(
            signer=token_signer,
            store=session_store,
            access_lifetime_seconds=self._config.access_token_lifetime_seconds,
            refresh_lifetime_seconds=self._config.refresh_token_lifetime_seconds,
        )
        self._resets = OneTimeTokenFlow(
            token_signer,
            session_store,
            token_type="password_reset",
            ttl_seconds=self._config.password_reset_ttl_seconds,
            key_prefix="reset",
            keyed_by="token",
            error=InvalidOrExpiredTokenError,
        )
        self._challenges = OneTimeTokenFlow(
            token_signer,
            session_store,
            token_type="2fa_challenge",
            ttl_seconds=self._config.two_factor_challenge_ttl_seconds,
            key_prefix="2fa_challenge",
            keyed_by="subject",
            error=InvalidCodeError,
        )
        self._setups = OneTimeTokenFlow(
            token_signer,
            session_store,
            token_type="2fa_setup",
            ttl_seconds=self._config.two_factor_setup_ttl_seconds,
            key_prefix="2fa_setup",
            keyed_by="subject",
            error=NoPendingSetupError,
        )

    @property
    def token_service(self) -> TokenService:
        return self._tokens

    # ------------------------------------------------------------------
    # Signup / login
    # ------------------------------------------------------------------

    @_storage_guard
    async def signup(self, dto: SignupDTO, context: RequestContext | None = None) -> AuthenticatedDTO:
        """
        Register a principal and sign them in.

        All input checks run before anything is written. The principal and
        its domain-default records are committed together or not at all.

        Args:
            dto: Registration data
            context: Caller metadata for the audit trail

        Returns:
            AuthenticatedDTO with the new principal and a token pair

        Raises:
            ValidationFailedError: Bad email, weak password or empty role set
            ConflictError: Email already registered (case-insensitive)
        """
        details: list[str] = []
        email = dto.email
        try:
            email = check_email(dto.email)
        except ValidationFailedError as e:
            details.extend(e.details)
        details.extend(password_violations(dto.password, self._config.password_policy))
        roles = dto.roles if dto.roles is not None else list(self._config.default_roles)
        if not roles:
            details.append("At least one role is required")
        if details:
            raise ValidationFailedError(details=details)

        password_hash = self._password_hasher.hash(dto.password)

        async with self._uow_factory() as uow:
            if await uow.principals.email_exists(email):
                raise ConflictError()

            try:
                principal = await uow.principals.add(
                    Principal(
                        email=email,
                        name=dto.name,
                        password_hash=password_hash,
                        roles=frozenset(roles),
                        phone=dto.phone,
                    )
                )
            except EmailAlreadyRegisteredException as e:
                logger.info("Signup lost a race on an email registered concurrently")
                raise ConflictError() from e

            for provisioner in self._provisioners:
                await provisioner.provision(uow, principal)

            await uow.commit()

        assert principal.id is not None
        logger.info(f"Principal {principal.id} signed up with roles {sorted(principal.roles)}")

        tokens = await self._tokens.issue(principal)

        self._side_effects.dispatch(
            "welcome", lambda: self._notifier.send_welcome(principal.email, principal.name)
        )
        self._audit(principal.id, AuditAction.SIGNUP, "user", "New user registration", context)

        return AuthenticatedDTO(
            principal=PrincipalDTO.from_entity(principal),
            tokens=self._token_dto(tokens),
        )

    @_storage_guard
    async def login(self, dto: LoginDTO, context: RequestContext | None = None) -> LoginResultDTO:
        """
        Authenticate with email and password.

        Unknown email and wrong password are indistinguishable to the
        caller, in both message and hashing cost.

        Returns:
            LoginResultDTO with status "authenticated", or
            "two_factor_pending" and a challenge token

        Raises:
            InvalidCredentialsError: If email or password is incorrect
        """
        email = normalize_email(dto.email)

        async with self._uow_factory() as uow:
            principal = await uow.principals.get_by_email(email)

        if principal is None:
            self._password_hasher.verify(dto.password, self._dummy_hash())
            logger.info("Login attempt for unknown email")
            raise InvalidCredentialsError()

        assert principal.id is not None
        if not self._password_hasher.verify(dto.password, principal.password_hash):
            logger.info(f"Wrong password for principal {principal.id}")
            self._audit(principal.id, AuditAction.FAILED_LOGIN, "session", "Invalid password", context)
            raise InvalidCredentialsError()

        if principal.two_factor_enabled:
            challenge_token = await self._challenges.issue(principal.id)
            logger.info(f"Principal {principal.id} passed password check, 2FA challenge issued")
            return LoginResultDTO(status="two_factor_pending", challenge_token=challenge_token)

        tokens = await self._tokens.issue(principal)
        self._audit(principal.id, AuditAction.LOGIN, "session", "User logged in", context)

        return LoginResultDTO(
            status="authenticated",
            tokens=self._token_dto(tokens),
            principal=PrincipalDTO.from_entity(principal),
        )

    @_storage_guard
    async def verify_two_factor(
        self, dto: VerifyTwoFactorDTO, context: RequestContext | None = None
    ) -> LoginResultDTO:
        """
        Redeem a login challenge with a TOTP code or a backup code.

        Every failure (bad code, expired or superseded challenge, 2FA turned
        off in between) raises the same InvalidCodeError.
        """
        claims = await self._challenges.verify(dto.challenge_token)
        subject_id = claims.subject_id

        async with self._uow_factory() as uow:
            principal = await uow.principals.get_by_id(subject_id)

        if principal is None or not principal.two_factor_enabled:
            logger.warning(f"2FA challenge for subject {subject_id} without active 2FA")
            raise InvalidCodeError()

        redeemed_backup: tuple[str, dict, int] | None = None
        if not self._two_factor.verify(principal.two_factor_secret, dto.code):
            redeemed_backup = await self._match_backup_code(subject_id, dto.code)
            if redeemed_backup is None:
                logger.warning(f"Invalid 2FA code for subject {subject_id}")
                self._audit(
                    subject_id, AuditAction.FAILED_TWO_FACTOR, "session", "Invalid 2FA code", context
                )
                raise InvalidCodeError()

        # Challenge is consumed before the backup code is spent. Losing a race
        # against a concurrent verification fails here
        await self._challenges.consume(dto.challenge_token)

        details = "User logged in with 2FA"
        if redeemed_backup is not None:
            await self._spend_backup_code(subject_id, *redeemed_backup)
            details = "User logged in with a 2FA backup code"

        tokens = await self._tokens.issue(principal)
        self._audit(subject_id, AuditAction.TWO_FACTOR_SUCCESS, "session", details, context)

        return LoginResultDTO(
            status="authenticated",
            tokens=self._token_dto(tokens),
            principal=PrincipalDTO.from_entity(principal),
        )

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    @_storage_guard
    async def logout(
        self, subject_id: int, access_token: str, context: RequestContext | None = None
    ) -> AcknowledgementDTO:
        """End the session and revoke the presented access token. Idempotent."""
        await self._tokens.revoke(subject_id, access_token)
        self._audit(subject_id, AuditAction.LOGOUT, "session", "User logged out", context)
        return AcknowledgementDTO(message="Logged out successfully")

    @_storage_guard
    async def refresh(self, dto: RefreshTokenDTO) -> TokenPairDTO:
        """
        Rotate the subject's live refresh token.

        Raises:
            InvalidOrExpiredTokenError: Expired, malformed or superseded token,
                or the principal no longer exists
        """
        subject_id = self._tokens.read_refresh_subject(dto.refresh_token)

        async with self._uow_factory() as uow:
            principal = await uow.principals.get_by_id(subject_id)

        if principal is None:
            logger.warning(f"Refresh for missing principal {subject_id}")
            raise InvalidOrExpiredTokenError()

        tokens = await self._tokens.rotate(dto.refresh_token, principal)
        return self._token_dto(tokens)

    @_storage_guard
    async def get_current_principal(self, access_token: str) -> PrincipalDTO:
        """
        Resolve a bearer access token to its principal.

        Raises:
            TokenRevokedError / TokenExpiredError / InvalidTokenError
            PrincipalNotFoundError: If the principal no longer exists
        """
        subject_id = await self._tokens.validate_access(access_token)

        async with self._uow_factory() as uow:
            principal = await uow.principals.get_by_id(subject_id)

        if principal is None:
            raise PrincipalNotFoundError()

        return PrincipalDTO.from_entity(principal)

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    @_storage_guard
    async def request_password_reset(
        self, dto: PasswordResetRequestDTO, context: RequestContext | None = None
    ) -> AcknowledgementDTO:
        """Send a reset token if the account exists; the reply is identical either way."""
        email = normalize_email(dto.email)

        async with self._uow_factory() as uow:
            principal = await uow.principals.get_by_email(email)

        if principal is not None:
            assert principal.id is not None
            token = await self._resets.issue(principal.id, email=principal.email)
            self._side_effects.dispatch(
                "password_reset",
                lambda: self._notifier.send_password_reset(principal.email, principal.name, token),
            )
            self._audit(
                principal.id, AuditAction.PASSWORD_RESET_REQUEST, "user", "Password reset requested", context
            )
        else:
            logger.info("Password reset requested for unknown email")

        return AcknowledgementDTO(message=RESET_ACKNOWLEDGEMENT)

    @_storage_guard
    async def confirm_password_reset(
        self, dto: PasswordResetConfirmDTO, context: RequestContext | None = None
    ) -> AcknowledgementDTO:
        """
        Set a new password with a reset token and end the principal's session.

        A weak password is rejected without consuming the token.

        Raises:
            InvalidOrExpiredTokenError: Token invalid, expired or already used
            ValidationFailedError: New password breaks the policy
        """
        claims = await self._resets.verify(dto.token)

        check_password(dto.new_password, self._config.password_policy)

        new_hash = self._password_hasher.hash(dto.new_password)

        await self._resets.consume(dto.token)

        async with self._uow_factory() as uow:
            principal = await uow.principals.get_by_id(claims.subject_id)
            if principal is None:
                raise InvalidOrExpiredTokenError()
            principal.change_password(new_hash)
            await uow.principals.update(principal)
            await uow.commit()

        await self._tokens.end_sessions(claims.subject_id)
        logger.info(f"Password reset for principal {claims.subject_id}")

        self._side_effects.dispatch(
            "password_changed",
            lambda: self._notifier.send_password_changed(principal.email, principal.name),
        )
        self._audit(
            claims.subject_id, AuditAction.PASSWORD_RESET, "user", "Password reset completed", context
        )

        return AcknowledgementDTO(message="Password has been reset successfully")

    # ------------------------------------------------------------------
    # Two-factor management
    # ------------------------------------------------------------------

    @_storage_guard
    async def enable_two_factor(self, subject_id: int) -> TwoFactorSetupDTO:
        """
        Start 2FA enrollment; the secret stays pending until confirmed.

        Starting again replaces any earlier pending secret.

        Raises:
            AlreadyEnabledError: If 2FA is already on
        """
        principal = await self._load_principal(subject_id)
        if principal.two_factor_enabled:
            raise AlreadyEnabledError()

        secret = self._two_factor.generate_secret()
        await self._setups.issue(subject_id, secret=secret)

        return TwoFactorSetupDTO(
            secret=secret,
            provisioning_uri=self._two_factor.provisioning_uri(
                secret, ACCOUNT_LABEL.format(email=principal.email)
            ),
        )

    @_storage_guard
    async def confirm_two_factor_setup(
        self, subject_id: int, dto: ConfirmTwoFactorDTO, context: RequestContext | None = None
    ) -> BackupCodesDTO:
        """
        Activate the pending secret once the principal proves they hold it.

        A wrong code leaves the pending enrollment in place for another try.

        Returns:
            BackupCodesDTO with the plaintext codes (shown once, stored hashed)

        Raises:
            NoPendingSetupError: No live pending enrollment
            InvalidCodeError: Code does not match the pending secret
        """
        token = await self._setups.load_token(subject_id)
        if token is None:
            raise NoPendingSetupError()
        claims = await self._setups.verify(token)
        secret = claims.extra.get("secret")
        if claims.subject_id != subject_id or not secret:
            raise NoPendingSetupError()

        if not self._two_factor.verify(secret, dto.code):
            logger.info(f"Wrong code while confirming 2FA setup for principal {subject_id}")
            raise InvalidCodeError()

        await self._setups.consume(token)

        async with self._uow_factory() as uow:
            principal = await uow.principals.get_by_id(subject_id)
            if principal is None:
                raise PrincipalNotFoundError()
            if principal.two_factor_enabled:
                raise AlreadyEnabledError()
            principal.enable_two_factor(secret)
            await uow.principals.update(principal)
            await uow.commit()

        codes = self._two_factor.generate_backup_codes(
            self._config.backup_code_count, self._config.backup_code_length
        )
        await self._store_backup_codes(subject_id, [self._password_hasher.hash(c) for c in codes])

        self._audit(
            subject_id, AuditAction.TWO_FACTOR_ENABLED, "user", "Two-factor authentication enabled", context
        )
        return BackupCodesDTO(backup_codes=codes)

    @_storage_guard
    async def disable_two_factor(
        self, subject_id: int, dto: DisableTwoFactorDTO, context: RequestContext | None = None
    ) -> AcknowledgementDTO:
        """
        Turn 2FA off after re-checking the password.

        Raises:
            InvalidCredentialsError: Password does not match
        """
        async with self._uow_factory() as uow:
            principal = await uow.principals.get_by_id(subject_id)
            if principal is None:
                raise PrincipalNotFoundError()
            if not self._password_hasher.verify(dto.password, principal.password_hash):
                raise InvalidCredentialsError()
            principal.disable_two_factor()
            await uow.principals.update(principal)
            await uow.commit()

        await self._store.delete(backup_codes_key(subject_id))
        await self._setups.discard(subject_id)
        await self._challenges.discard(subject_id)

        self._audit(
            subject_id, AuditAction.TWO_FACTOR_DISABLED, "user", "Two-factor authentication disabled", context
        )
        return AcknowledgementDTO(message="Two-factor authentication disabled")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load_principal(self, subject_id: int) -> Principal:
        async with self._uow_factory() as uow:
            principal = await uow.principals.get_by_id(subject_id)
        if principal is None:
            raise PrincipalNotFoundError()
        return principal

    def _token_dto(self, tokens: TokenPair) -> TokenPairDTO:
        return TokenPairDTO(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_type="bearer",
            expires_in=tokens.expires_in,
        )

    def _dummy_hash(self) -> str:
        # Unknown-email logins pay one verify against this, like real ones
        if self._dummy_password_hash is None:
            self._dummy_password_hash = self._password_hasher.hash("unknown-account-password")
        return self._dummy_password_hash

    def _audit(
        self,
        subject_id: int | None,
        action: AuditAction,
        resource: str,
        details: str,
        context: RequestContext | None,
    ) -> None:
        self._side_effects.dispatch(
            f"audit:{action}",
            lambda: self._audit_sink.record(subject_id, action, resource, details, context),
        )

    async def _store_backup_codes(
        self, subject_id: int, hashes: list[str], expires_at: float | None = None
    ) -> None:
        if expires_at is None:
            expires_at = time.time() + self._config.backup_code_ttl_seconds
        ttl = int(expires_at - time.time())
        if not hashes or ttl <= 0:
            await self._store.delete(backup_codes_key(subject_id))
            return
        record = json.dumps({"hashes": hashes, "expires_at": expires_at})
        await self._store.set_with_ttl(backup_codes_key(subject_id), record, ttl)

    async def _match_backup_code(self, subject_id: int, code: str) -> tuple[str, dict, int] | None:
        """Find the stored backup code matching `code` without spending it."""
        raw = await self._store.get(backup_codes_key(subject_id))
        if raw is None:
            return None
        try:
            record = json.loads(raw)
            hashes = list(record["hashes"])
        except (json.JSONDecodeError, KeyError, TypeError):
            logger.warning(f"Corrupt backup code record for subject {subject_id}")
            return None

        candidate = code.strip().upper()
        for index, hashed in enumerate(hashes):
            if self._password_hasher.verify(candidate, hashed):
                return raw, record, index
        return None

    async def _spend_backup_code(self, subject_id: int, raw: str, record: dict, index: int) -> None:
        """
        Remove a matched code, only if the stored record is still the one it was matched in.

        Raises:
            InvalidCodeError: The record changed since the match (code spent concurrently)
        """
        if not await self._store.compare_and_delete(backup_codes_key(subject_id), raw):
            logger.warning(f"Backup code record for subject {subject_id} changed during redemption")
            raise InvalidCodeError()
        hashes = list(record["hashes"])
        del hashes[index]
        await self._store_backup_codes(subject_id, hashes, record.get("expires_at"))
        logger.info(f"Backup code used by subject {subject_id}, {len(hashes)} remaining")
