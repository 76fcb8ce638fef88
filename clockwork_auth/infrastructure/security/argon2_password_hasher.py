"""Argon2 password hasher implementation using pwdlib.

Used for account passwords and for 2FA backup codes. pwdlib is only
imported here; the application layer sees IPasswordHasher.
"""

import logging

from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError
from pwdlib.hashers.argon2 import Argon2Hasher

from clockwork_auth.domain.services.password_hasher import IPasswordHasher

logger = logging.getLogger(__name__)


class Argon2PasswordHasher(IPasswordHasher):
    """
    Argon2id hasher with pwdlib's defaults (64 MB memory, 3 iterations, 4 lanes).

    Usage:
        hasher = Argon2PasswordHasher()
        hashed = hasher.hash("Str0ng!Pass")
        hasher.verify("Str0ng!Pass", hashed)   # True
        hasher.verify("wrong", hashed)         # False
        hasher.verify("anything", "not-a-hash")  # False
    """

    def __init__(self):
        self._password_hash = PasswordHash((Argon2Hasher(),))

    def hash(self, plain_password: str) -> str:
        """Hash with a fresh random salt; the same input never hashes the same twice."""
        return self._password_hash.hash(plain_password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Constant-time check; unrecognised hash formats verify as False."""
        try:
            return self._password_hash.verify(plain_password, hashed_password)
        except UnknownHashError:
            logger.warning("Password verification against an unrecognised hash format")
            return False
