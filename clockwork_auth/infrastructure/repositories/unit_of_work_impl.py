"""Unit of Work implementation using SQLAlchemy."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clockwork_auth.domain.repositories.unit_of_work import IUnitOfWork
from clockwork_auth.infrastructure.repositories.principal_repository_impl import PrincipalRepository

logger = logging.getLogger(__name__)


class UnitOfWork(IUnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work.

    This class:
    1. Manages the SQLAlchemy async session lifecycle
    2. Provides access to the principal repository within a transaction
    3. Lets account provisioners write their default records in the same session
    4. Rolls back when the block raises; otherwise only explicit commits persist
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize UoW with a session factory.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    @property
    def session(self) -> AsyncSession:
        """The active session, for provisioners that own their own ORM models."""
        if self._session is None:
            raise RuntimeError("No active session: use 'async with uow:'")
        return self._session

    async def __aenter__(self) -> "UnitOfWork":
        self._session = self._session_factory()
        self.principals = PrincipalRepository(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """
        Exit context manager.

        If an exception occurred (exc_type is not None), rollback.
        The session is always closed, which discards uncommitted work.
        """
        if exc_type is not None:
            logger.debug(f"Rolling back unit of work after {exc_type.__name__}")
            await self.rollback()

        if self._session is not None:
            await self._session.close()
            self._session = None

    async def commit(self) -> None:
        """Commit the current transaction."""
        if self._session is None:
            raise RuntimeError("Cannot commit: no active session")

        await self._session.commit()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        if self._session is None:
            raise RuntimeError("Cannot rollback: no active session")

        await self._session.rollback()
