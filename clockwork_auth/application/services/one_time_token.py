"""Signed one-time tokens mirrored in the session store.

A one-time token is valid only while (a) its signature, type and expiry
check out and (b) the session store still holds its mirror. Consuming the
token deletes the mirror with a single compare-and-delete, so of two
concurrent consumers exactly one wins.

Two keying modes exist:

- "token": key `{prefix}:{token}`, value = subject id. Any number of
  tokens may be live per subject (password reset).
- "subject": key `{prefix}:{subject_id}`, value = token. Issuing a new
  token supersedes the previous one (2FA challenge, 2FA enrollment).
"""

import logging
import uuid
from collections.abc import Callable
from typing import Any, Literal

from clockwork_auth.application.exceptions.exceptions import (
    ApplicationError,
    InvalidOrExpiredTokenError,
)
from clockwork_auth.domain.exceptions import MalformedTokenException
from clockwork_auth.domain.repositories.session_store import ISessionStore
from clockwork_auth.domain.services.token_signer import ITokenSigner, TokenClaims

logger = logging.getLogger(__name__)


class OneTimeTokenFlow:
    """
    Issue, verify and consume one kind of one-time token.

    Args:
        signer: Token signer
        store: Session store holding the mirrors
        token_type: Value of the `type` claim
        ttl_seconds: Lifetime of both the token and its mirror
        key_prefix: Session store key prefix
        keyed_by: "token" or "subject" (see module docstring)
        error: Factory for the exception raised on any verification failure
    """

    def __init__(
        self,
        signer: ITokenSigner,
        store: ISessionStore,
        token_type: str,
        ttl_seconds: int,
        key_prefix: str,
        keyed_by: Literal["token", "subject"] = "token",
        error: Callable[[], ApplicationError] = InvalidOrExpiredTokenError,
    ):
        self._signer = signer
        self._store = store
        self._token_type = token_type
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix
        self._keyed_by = keyed_by
        self._error = error

    def _key(self, subject_id: int, token: str) -> str:
        if self._keyed_by == "subject":
            return f"{self._key_prefix}:{subject_id}"
        return f"{self._key_prefix}:{token}"

    def _mirror_value(self, subject_id: int, token: str) -> str:
        return token if self._keyed_by == "subject" else str(subject_id)

    def _decode(self, token: str) -> TokenClaims:
        try:
            return self._signer.decode(token, expected_type=self._token_type)
        except MalformedTokenException as e:
            # ExpiredTokenException is a subclass
            logger.info(f"Rejected {self._token_type} token: {e.error_code}")
            raise self._error() from e

    async def issue(self, subject_id: int, **claims: Any) -> str:
        """
        Mint a token for `subject_id` and write its mirror.

        In subject-keyed mode the previous token of this kind stops being valid.
        """
        token = self._signer.encode(
            subject_id=subject_id,
            token_type=self._token_type,
            lifetime_seconds=self._ttl_seconds,
            jti=uuid.uuid4().hex,
            **claims,
        )
        await self._store.set_with_ttl(
            self._key(subject_id, token),
            self._mirror_value(subject_id, token),
            self._ttl_seconds,
        )
        return token

    async def verify(self, token: str) -> TokenClaims:
        """
        Check the token without consuming it.

        Raises:
            The configured error if the token is malformed, expired,
            superseded or already consumed
        """
        claims = self._decode(token)
        key = self._key(claims.subject_id, token)
        stored = await self._store.get(key)
        if stored != self._mirror_value(claims.subject_id, token):
            logger.info(f"{self._token_type} token for subject {claims.subject_id} has no live mirror")
            raise self._error()
        return claims

    async def consume(self, token: str) -> TokenClaims:
        """
        Verify and atomically invalidate the token.

        Raises:
            The configured error on any verification failure, including
            losing a race against a concurrent consumer
        """
        claims = self._decode(token)
        key = self._key(claims.subject_id, token)
        if not await self._store.compare_and_delete(key, self._mirror_value(claims.subject_id, token)):
            logger.warning(
                f"{self._token_type} token for subject {claims.subject_id} "
                "was already consumed or superseded"
            )
            raise self._error()
        return claims

    async def load_token(self, subject_id: int) -> str | None:
        """Raw live token of a subject-keyed flow, if any."""
        if self._keyed_by != "subject":
            raise TypeError("load_token() requires a subject-keyed flow")
        return await self._store.get(self._key(subject_id, ""))

    async def discard(self, subject_id: int) -> None:
        """Drop the live token of a subject-keyed flow. Idempotent."""
        if self._keyed_by != "subject":
            raise TypeError("discard() requires a subject-keyed flow")
        await self._store.delete(self._key(subject_id, ""))
