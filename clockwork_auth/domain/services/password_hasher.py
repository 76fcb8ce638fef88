"""Password hashing interface - domain service abstraction.

Passwords and 2FA backup codes are never stored in the clear. The domain
requires a deliberately slow, salted hash; which algorithm and library
provide it is an infrastructure decision.
"""

from abc import ABC, abstractmethod


class IPasswordHasher(ABC):
    """
    Interface for password hashing operations.

    Implementations must generate a unique salt per hash and embed it
    (with the algorithm parameters) in the returned string.
    """

    @abstractmethod
    def hash(self, plain_password: str) -> str:
        """
        Hash a plain text secret.

        Args:
            plain_password: The plain text password (or backup code) to hash

        Returns:
            Self-describing hash string

        Example:
            hashed = hasher.hash("Str0ng!Pass")
            # "$argon2id$v=19$m=65536,t=3,p=4$..."
        """
        pass

    @abstractmethod
    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a plain text secret against a stored hash.

        Must return False (never raise) for malformed hashes.

        Args:
            plain_password: The candidate secret
            hashed_password: The previously produced hash

        Returns:
            True if the secret matches, False otherwise
        """
        pass
