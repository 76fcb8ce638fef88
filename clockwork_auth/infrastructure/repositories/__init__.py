"""Repository and session store implementations."""

from clockwork_auth.infrastructure.repositories.principal_repository_impl import PrincipalRepository
from clockwork_auth.infrastructure.repositories.session_store_memory import InMemorySessionStore
from clockwork_auth.infrastructure.repositories.session_store_redis import RedisSessionStore
from clockwork_auth.infrastructure.repositories.unit_of_work_impl import UnitOfWork

__all__ = ["PrincipalRepository", "UnitOfWork", "InMemorySessionStore", "RedisSessionStore"]
