"""Token signer interface - domain layer abstraction.

Every bearer credential in the system (access, refresh, 2FA challenge,
2FA enrollment, password reset) is a signed, self-contained claim set
with a `type` claim. The signer only encodes and decodes: it knows
nothing about sessions, blacklists or mirrors, which live in the
session store and are checked by the application layer.

The domain does NOT care:
- What token format is used (JWT, PASETO, ...)
- Which library implements it
- How tokens are signed (HS256, RS256, ...)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class TokenClaims:
    """Decoded, verified claim set."""

    subject_id: int
    token_type: str
    issued_at: datetime
    expires_at: datetime
    token_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_expired(self) -> bool:
        return datetime.now(UTC) >= self.expires_at

    @property
    def remaining_seconds(self) -> int:
        """Whole seconds until expiry (0 when already expired)."""
        return max(0, int((self.expires_at - datetime.now(UTC)).total_seconds()))


class ITokenSigner(ABC):
    """Interface for signing and verifying typed claim sets."""

    @abstractmethod
    def encode(
        self,
        subject_id: int,
        token_type: str,
        lifetime_seconds: int,
        **extra_claims: Any,
    ) -> str:
        """
        Mint a signed token.

        Args:
            subject_id: Principal the token is about
            token_type: Value of the `type` claim ("access", "refresh", ...)
            lifetime_seconds: Seconds until expiry
            **extra_claims: Additional JSON-serializable claims

        Returns:
            Encoded token string
        """
        pass

    @abstractmethod
    def decode(
        self,
        token: str,
        expected_type: str,
        verify_expiry: bool = True,
    ) -> TokenClaims:
        """
        Verify signature, expiry and type, and return the claims.

        Args:
            token: Encoded token
            expected_type: Required value of the `type` claim
            verify_expiry: Set False to read claims of an expired token
                (still signature-checked)

        Returns:
            TokenClaims

        Raises:
            ExpiredTokenException: Signature valid but token expired
            MalformedTokenException: Bad signature, bad shape or wrong type
        """
        pass
