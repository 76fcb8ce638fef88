"""JWT token signer implementation using PyJWT.

This is an INFRASTRUCTURE detail. The domain layer (ITokenSigner interface)
defines WHAT we need (typed, signed, expiring claim sets), while this
implementation defines HOW we do it (JWT via PyJWT).

Dependency flow:
    TokenService / OneTimeTokenFlow (application) → ITokenSigner (domain) ← JWTTokenSigner (infrastructure)
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from clockwork_auth.domain.exceptions import ExpiredTokenException, MalformedTokenException
from clockwork_auth.domain.services.token_signer import ITokenSigner, TokenClaims

RESERVED_CLAIMS = frozenset({"sub", "type", "exp", "iat", "jti"})


class JWTTokenSigner(ITokenSigner):
    """
    Production token signer using JWT (JSON Web Tokens) via PyJWT.

    Payload layout:
    - sub: Subject id (string, per RFC 7519)
    - type: Token kind ("access", "refresh", "2fa_challenge", "2fa_setup", "password_reset")
    - iat / exp: Issued-at and expiry
    - jti: Optional unique identifier
    - any extra claims passed to encode()

    Security Considerations:
    - Uses HS256 (HMAC with SHA-256) by default
    - Secret key must be at least 32 characters (checked here and in Settings)
    - The type claim is always checked on decode, so one kind of token can
      never be replayed as another
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        """
        Initialize JWT token signer.

        Args:
            secret_key: Secret key for signing tokens (min 32 characters)
            algorithm: JWT signing algorithm (default: HS256)

        Raises:
            ValueError: If secret_key is too short
        """
        if not secret_key or len(secret_key) < 32:
            raise ValueError("Secret key must be at least 32 characters long")

        self._secret_key = secret_key
        self._algorithm = algorithm

    def encode(
        self,
        subject_id: int,
        token_type: str,
        lifetime_seconds: int,
        **extra_claims: Any,
    ) -> str:
        """
        Generate a signed JWT.

        Example:
            >>> signer = JWTTokenSigner(secret_key="x" * 32)
            >>> token = signer.encode(123, "access", 900, roles=["client"], jti="abc")
            >>> print(token)
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.eyJzdWIiOiIxMjMi..."
        """
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            key: value for key, value in extra_claims.items() if key not in RESERVED_CLAIMS
        }
        payload.update(
            {
                "sub": str(subject_id),
                "type": token_type,
                "iat": now,
                "exp": now + timedelta(seconds=lifetime_seconds),
            }
        )
        if extra_claims.get("jti"):
            payload["jti"] = str(extra_claims["jti"])

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def decode(
        self,
        token: str,
        expected_type: str,
        verify_expiry: bool = True,
    ) -> TokenClaims:
        """
        Verify and decode a JWT.

        Raises:
            ExpiredTokenException: If the signature is valid but the token expired
            MalformedTokenException: If the signature, shape or type is wrong
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": verify_expiry, "require": ["sub", "exp", "iat"]},
            )
        except ExpiredSignatureError as e:
            raise ExpiredTokenException() from e
        except InvalidTokenError as e:
            raise MalformedTokenException(f"Invalid token: {e}") from e

        if payload.get("type") != expected_type:
            raise MalformedTokenException(
                f"Expected a {expected_type} token, got {payload.get('type')!r}"
            )

        try:
            subject_id = int(payload["sub"])
            issued_at = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
            expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedTokenException("Token claims are malformed") from e

        return TokenClaims(
            subject_id=subject_id,
            token_type=expected_type,
            issued_at=issued_at,
            expires_at=expires_at,
            token_id=payload.get("jti"),
            extra={key: value for key, value in payload.items() if key not in RESERVED_CLAIMS},
        )
