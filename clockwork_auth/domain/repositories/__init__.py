"""Repository interfaces - define contracts for data access."""

from clockwork_auth.domain.repositories.base import IRepository
from clockwork_auth.domain.repositories.principal_repository import IPrincipalRepository
from clockwork_auth.domain.repositories.session_store import ISessionStore
from clockwork_auth.domain.repositories.unit_of_work import IUnitOfWork

__all__ = ["IRepository", "IPrincipalRepository", "ISessionStore", "IUnitOfWork"]
