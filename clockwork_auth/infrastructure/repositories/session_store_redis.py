"""Redis session store implementation.

Production ISessionStore: every record is a plain string key with a
native Redis TTL, so expiry needs no cleanup job and the store is shared
by every worker process. Compare-and-delete runs as a Lua script, which
Redis executes atomically.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from clockwork_auth.domain.exceptions import SessionStoreUnavailableException
from clockwork_auth.domain.repositories.session_store import ISessionStore

logger = logging.getLogger(__name__)


class RedisSessionStore(ISessionStore):
    """ISessionStore on top of redis.asyncio."""

    DEFAULT_OPERATION_TIMEOUT = 5.0

    _COMPARE_AND_DELETE_SCRIPT = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
  return redis.call('DEL', KEYS[1])
end
return 0
"""

    def __init__(self, client: aioredis.Redis):
        self.client = client
        self._compare_and_delete = self.client.register_script(self._COMPARE_AND_DELETE_SCRIPT)

    @classmethod
    def from_url(
        cls, redis_url: str, *, socket_timeout: float = DEFAULT_OPERATION_TIMEOUT
    ) -> "RedisSessionStore":
        client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        try:
            await self.client.set(key, value, ex=ttl_seconds)
        except RedisError as e:
            logger.error(f"Redis SET failed for key prefix {key.split(':', 1)[0]}: {e}")
            raise SessionStoreUnavailableException() from e

    async def get(self, key: str) -> str | None:
        try:
            return await self.client.get(key)
        except RedisError as e:
            logger.error(f"Redis GET failed for key prefix {key.split(':', 1)[0]}: {e}")
            raise SessionStoreUnavailableException() from e

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError as e:
            logger.error(f"Redis DEL failed for key prefix {key.split(':', 1)[0]}: {e}")
            raise SessionStoreUnavailableException() from e

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        try:
            deleted = await self._compare_and_delete(keys=[key], args=[expected])
        except RedisError as e:
            logger.error(f"Redis compare-and-delete failed for key prefix {key.split(':', 1)[0]}: {e}")
            raise SessionStoreUnavailableException() from e
        return int(deleted) == 1

    async def close(self) -> None:
        await self.client.aclose()
