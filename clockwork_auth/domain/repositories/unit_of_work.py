"""Unit of Work interface - domain layer."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clockwork_auth.domain.repositories.principal_repository import IPrincipalRepository


class IUnitOfWork(ABC):
    """
    Unit of Work interface for managing transactions.

    The UoW is the transaction boundary the orchestrator opens: signup
    inserts the principal and its domain-default records through the same
    UoW so that they are committed or rolled back together.
    """

    principals: "IPrincipalRepository"

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        """Start a database transaction/session."""
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """
        Exit async context manager.

        If an exception escaped the block, roll back. Uncommitted work is
        discarded either way; callers commit explicitly.
        """
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit the current transaction."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Roll back the current transaction."""
        pass
