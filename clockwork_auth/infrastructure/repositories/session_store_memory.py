"""In-memory session store implementation.

This is an INFRASTRUCTURE detail. The domain layer (ISessionStore interface)
defines WHAT we need (per-key TTL, atomic compare-and-delete), while this
implementation defines HOW we do it (a dictionary guarded by an asyncio lock).

This implementation:
1. Is suitable for development, tests and single-process deployments
2. Is replaced by RedisSessionStore when REDIS_URL is configured
3. Drops expired entries lazily on access and on every write

Limitations:
- Data lost on restart
- Not shared between worker processes
"""

import asyncio
import time

from clockwork_auth.domain.repositories.session_store import ISessionStore


class InMemorySessionStore(ISessionStore):
    """Dictionary-backed ISessionStore using the monotonic clock for expiry."""

    def __init__(self) -> None:
        # key -> (value, monotonic expiry)
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = asyncio.Lock()

    def _live_value(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return value

    def _purge_expired(self) -> None:
        now = time.monotonic()
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        async with self._lock:
            self._purge_expired()
            self._entries[key] = (value, time.monotonic() + ttl_seconds)

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._live_value(key)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        async with self._lock:
            if self._live_value(key) != expected:
                return False
            del self._entries[key]
            return True

    async def clear(self) -> None:
        """Remove all entries (useful for testing)."""
        async with self._lock:
            self._entries.clear()
