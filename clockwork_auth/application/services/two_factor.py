"""TOTP second-factor primitives.

Pure functions of their inputs (plus the clock): no storage, no network.
Codes are 6-digit, 30-second-step TOTP (RFC 6238) as produced by any
authenticator app.
"""

import logging
import secrets
import string
from datetime import datetime

import pyotp

logger = logging.getLogger(__name__)

BACKUP_CODE_ALPHABET = string.ascii_uppercase + string.digits


class TwoFactorManager:
    """
    Provision and verify TOTP secrets.

    Args:
        issuer: Issuer shown by authenticator apps
        valid_window: Accepted clock drift, in 30-second steps either way
    """

    def __init__(self, issuer: str = "ClockWork Platform", valid_window: int = 2):
        self._issuer = issuer
        self._valid_window = valid_window

    def generate_secret(self) -> str:
        """New random base32 secret (160 bits)."""
        return pyotp.random_base32()

    def provisioning_uri(self, secret: str, account_label: str) -> str:
        """
        Build the `otpauth://totp/...` URI an authenticator app enrolls from.

        Example:
            manager.provisioning_uri(secret, "ClockWork (a@b.com)")
            # "otpauth://totp/ClockWork%20Platform:ClockWork%20%28a%40b.com%29?secret=...&issuer=ClockWork%20Platform"
        """
        return pyotp.TOTP(secret).provisioning_uri(name=account_label, issuer_name=self._issuer)

    def verify(self, secret: str | None, code: str, at: datetime | None = None) -> bool:
        """
        Check a code against the secret, tolerating `valid_window` steps of drift.

        Malformed secrets and codes verify as False.
        """
        if not secret or not code:
            return False
        code = code.strip().replace(" ", "")
        if not code.isdigit():
            return False
        try:
            return pyotp.TOTP(secret).verify(code, for_time=at, valid_window=self._valid_window)
        except (ValueError, TypeError):
            logger.warning("TOTP verification attempted with a malformed secret")
            return False

    def current_code(self, secret: str, at: datetime | None = None) -> str:
        """The code an authenticator app shows for `secret` at `at` (default: now)."""
        totp = pyotp.TOTP(secret)
        return totp.at(at) if at is not None else totp.now()

    @staticmethod
    def generate_backup_codes(count: int = 8, length: int = 8) -> list[str]:
        """Single-use recovery codes, uppercase alphanumeric."""
        return [
            "".join(secrets.choice(BACKUP_CODE_ALPHABET) for _ in range(length))
            for _ in range(count)
        ]
