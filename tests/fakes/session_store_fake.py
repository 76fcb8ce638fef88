"""Fake session store for testing.

Behaves like the real stores but lets tests expire keys on demand,
inspect TTLs and simulate an unreachable backend.
"""

from clockwork_auth.domain.exceptions import SessionStoreUnavailableException
from clockwork_auth.domain.repositories.session_store import ISessionStore


class FakeSessionStore(ISessionStore):
    """
    In-memory ISessionStore with manual expiry.

    Usage:
        store = FakeSessionStore()
        await store.set_with_ttl("refresh:1", "...", 60)
        store.expire("refresh:1")        # simulate TTL elapsing
        store.unavailable = True         # every call now raises
    """

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.unavailable = False

    def _check(self) -> None:
        if self.unavailable:
            raise SessionStoreUnavailableException("Connection refused")

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        self._check()
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.values[key] = value
        self.ttls[key] = ttl_seconds

    async def get(self, key: str) -> str | None:
        self._check()
        return self.values.get(key)

    async def delete(self, key: str) -> None:
        self._check()
        self.values.pop(key, None)
        self.ttls.pop(key, None)

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        self._check()
        if self.values.get(key) != expected:
            return False
        await self.delete(key)
        return True

    # Helper methods for testing

    def expire(self, key: str) -> None:
        """Drop a key as if its TTL had elapsed."""
        self.values.pop(key, None)
        self.ttls.pop(key, None)

    def keys_with_prefix(self, prefix: str) -> list[str]:
        return [key for key in self.values if key.startswith(prefix)]
