"""Principal domain entity - pure business logic, no infrastructure."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from clockwork_auth.domain.exceptions import (
    BusinessRuleViolationException,
    InvalidEntityStateException,
)


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookups (case-insensitive)."""
    return email.strip().lower()


@dataclass
class Principal:
    """
    An account that can authenticate against the platform.

    The entity owns the invariants that must hold whatever the storage:
    - email is stored lowercase
    - the role set is never empty
    - a 2FA secret exists if and only if 2FA is enabled
    """

    email: str
    name: str
    password_hash: str
    roles: frozenset[str] = field(default_factory=lambda: frozenset({"client"}))
    phone: Optional[str] = None
    two_factor_enabled: bool = False
    two_factor_secret: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.email or "@" not in self.email:
            raise InvalidEntityStateException(
                f"Invalid email address: '{self.email}'. Email must contain '@' symbol."
            )
        self.email = normalize_email(self.email)

        if not self.name or len(self.name.strip()) == 0:
            raise InvalidEntityStateException("Name cannot be empty.")

        if not self.password_hash:
            raise InvalidEntityStateException(
                "Password hash is required. Principal cannot exist without credentials."
            )

        self.roles = frozenset(self.roles)
        if not self.roles:
            raise InvalidEntityStateException("Principal must hold at least one role.")

        if self.two_factor_enabled != bool(self.two_factor_secret):
            raise InvalidEntityStateException(
                "Two-factor secret must be present exactly when two-factor is enabled."
            )

    def change_password(self, new_password_hash: str) -> None:
        """Replace the stored password hash."""
        if not new_password_hash:
            raise BusinessRuleViolationException("Password hash cannot be empty.")

        object.__setattr__(self, "password_hash", new_password_hash)
        object.__setattr__(self, "updated_at", datetime.now(timezone.utc))

    def enable_two_factor(self, secret: str) -> None:
        """
        Turn on TOTP for this principal.

        Raises:
            BusinessRuleViolationException: If 2FA is already on or the secret is empty
        """
        if self.two_factor_enabled:
            raise BusinessRuleViolationException("Two-factor authentication is already enabled.")
        if not secret:
            raise BusinessRuleViolationException("Two-factor secret cannot be empty.")

        object.__setattr__(self, "two_factor_secret", secret)
        object.__setattr__(self, "two_factor_enabled", True)
        object.__setattr__(self, "updated_at", datetime.now(timezone.utc))

    def disable_two_factor(self) -> None:
        """Turn off TOTP and forget the secret. Safe to call when already off."""
        object.__setattr__(self, "two_factor_secret", None)
        object.__setattr__(self, "two_factor_enabled", False)
        object.__setattr__(self, "updated_at", datetime.now(timezone.utc))
