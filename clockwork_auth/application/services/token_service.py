"""Access/refresh token lifecycle.

Access tokens are stateless apart from explicit revocation: a logout
writes the exact token string into a blacklist entry that lives as long
as the token would have. Refresh tokens are stateful: each subject has
one session record holding its single live refresh token, and a refresh
token is honoured only if it byte-equals that record. Issuing a new pair
overwrites the record, which silently invalidates every earlier refresh
token of the subject.
"""

import json
import logging
import uuid
from dataclasses import dataclass

from clockwork_auth.application.exceptions.exceptions import (
    InvalidOrExpiredTokenError,
    InvalidTokenError,
    TokenExpiredError,
    TokenRevokedError,
)
from clockwork_auth.domain.entities.principal import Principal
from clockwork_auth.domain.exceptions import ExpiredTokenException, MalformedTokenException
from clockwork_auth.domain.repositories.session_store import ISessionStore
from clockwork_auth.domain.services.token_signer import ITokenSigner

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


def session_key(subject_id: int) -> str:
    return f"refresh:{subject_id}"


def blacklist_key(access_token: str) -> str:
    return f"blacklist:{access_token}"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int


class TokenService:
    """
    Mint, validate, rotate and revoke bearer tokens.

    Args:
        signer: Token signer (fatal misconfiguration surfaces when it is built)
        store: Session store for session records and blacklist entries
        access_lifetime_seconds: Access token lifetime
        refresh_lifetime_seconds: Refresh token and session record lifetime
    """

    def __init__(
        self,
        signer: ITokenSigner,
        store: ISessionStore,
        access_lifetime_seconds: int = 15 * 60,
        refresh_lifetime_seconds: int = 7 * 24 * 60 * 60,
    ):
        self._signer = signer
        self._store = store
        self._access_lifetime = access_lifetime_seconds
        self._refresh_lifetime = refresh_lifetime_seconds

    async def issue(self, principal: Principal) -> TokenPair:
        """
        Mint a fresh pair and make its refresh token the subject's only live one.

        The session record TTL is reset to the full refresh lifetime.
        """
        assert principal.id is not None
        roles = sorted(principal.roles)
        access_token = self._signer.encode(
            subject_id=principal.id,
            token_type=ACCESS,
            lifetime_seconds=self._access_lifetime,
            roles=roles,
            jti=uuid.uuid4().hex,
        )
        refresh_token = self._signer.encode(
            subject_id=principal.id,
            token_type=REFRESH,
            lifetime_seconds=self._refresh_lifetime,
            jti=uuid.uuid4().hex,
        )

        record = json.dumps({"token": refresh_token, "email": principal.email, "roles": roles})
        await self._store.set_with_ttl(session_key(principal.id), record, self._refresh_lifetime)

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self._access_lifetime,
        )

    async def validate_access(self, token: str) -> int:
        """
        Return the subject id of a live access token.

        Raises:
            TokenExpiredError: Token is past its expiry
            InvalidTokenError: Bad signature, shape or type
            TokenRevokedError: Token was revoked by logout
        """
        try:
            claims = self._signer.decode(token, expected_type=ACCESS)
        except ExpiredTokenException as e:
            raise TokenExpiredError() from e
        except MalformedTokenException as e:
            raise InvalidTokenError() from e

        if await self._store.get(blacklist_key(token)) is not None:
            logger.info(f"Revoked access token presented for subject {claims.subject_id}")
            raise TokenRevokedError()

        return claims.subject_id

    def read_refresh_subject(self, token: str) -> int:
        """
        Signature, expiry and type check only; no store lookup.

        Raises:
            InvalidOrExpiredTokenError: On any failure
        """
        try:
            return self._signer.decode(token, expected_type=REFRESH).subject_id
        except MalformedTokenException as e:
            raise InvalidOrExpiredTokenError() from e

    async def rotate(self, refresh_token: str, principal: Principal) -> TokenPair:
        """
        Exchange the subject's live refresh token for a fresh pair.

        Raises:
            InvalidOrExpiredTokenError: Token invalid or expired, no session
                record, token superseded, or token not issued to `principal`
        """
        subject_id = self.read_refresh_subject(refresh_token)
        if subject_id != principal.id:
            logger.warning(
                f"Refresh token for subject {subject_id} presented for principal {principal.id}"
            )
            raise InvalidOrExpiredTokenError()

        raw = await self._store.get(session_key(subject_id))
        if raw is None:
            logger.info(f"No live session for subject {subject_id}")
            raise InvalidOrExpiredTokenError()

        try:
            stored_token = json.loads(raw).get("token")
        except (json.JSONDecodeError, AttributeError):
            logger.warning(f"Corrupt session record for subject {subject_id}")
            raise InvalidOrExpiredTokenError()

        if stored_token != refresh_token:
            logger.warning(f"Superseded refresh token presented for subject {subject_id}")
            raise InvalidOrExpiredTokenError()

        return await self.issue(principal)

    async def revoke(self, subject_id: int, access_token: str) -> None:
        """
        End the subject's session and blacklist the presented access token.

        The blacklist entry lives exactly as long as the token would have;
        an already expired or undecodable token gets none. Idempotent.
        """
        await self._store.delete(session_key(subject_id))

        try:
            claims = self._signer.decode(access_token, expected_type=ACCESS, verify_expiry=False)
        except MalformedTokenException:
            logger.info(f"Logout for subject {subject_id} with an undecodable access token")
            return

        remaining = claims.remaining_seconds
        if remaining > 0:
            await self._store.set_with_ttl(blacklist_key(access_token), "1", remaining)

    async def end_sessions(self, subject_id: int) -> None:
        """Drop the subject's session record; outstanding access tokens run out naturally."""
        await self._store.delete(session_key(subject_id))
