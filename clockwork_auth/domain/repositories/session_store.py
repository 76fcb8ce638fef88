"""Session store interface - domain layer abstraction.

The session store holds every transient, security-relevant record of the
authentication subsystem:

1. The single live refresh token of each subject (session record)
2. Revoked access tokens (blacklist entries)
3. Pending second-factor challenges and enrollments
4. Password-reset token mirrors
5. Hashed 2FA backup codes

Every record carries its own TTL; nothing here outlives its expiry.
Implementations must make each operation atomic at single-key granularity.
"""

from abc import ABC, abstractmethod


class ISessionStore(ABC):
    """
    Key-value store with per-key expiry.

    Values are strings; structured records are serialized by the caller.
    Backend failures surface as SessionStoreUnavailableException.
    """

    @abstractmethod
    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store a value, overwriting any previous one, expiring after ttl_seconds.

        Args:
            key: Record key
            value: Serialized value
            ttl_seconds: Lifetime in seconds (must be positive)

        Example:
            await store.set_with_ttl("refresh:42", '{"token": "..."}', 604800)
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """
        Read a value.

        Returns:
            The stored value, or None if absent or expired
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key. Deleting a missing key is not an error."""
        pass

    @abstractmethod
    async def compare_and_delete(self, key: str, expected: str) -> bool:
        """
        Atomically delete a key only if it currently holds `expected`.

        This is the single round-trip check-then-delete used to consume
        one-time tokens: of two concurrent callers presenting the same
        value, exactly one observes True.

        Returns:
            True if the key held `expected` and was deleted, False otherwise

        Example:
            if not await store.compare_and_delete(f"reset:{token}", "42"):
                raise InvalidOrExpiredTokenError()
        """
        pass
