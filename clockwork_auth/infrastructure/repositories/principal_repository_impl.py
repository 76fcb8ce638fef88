"""Principal repository implementation using SQLAlchemy."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clockwork_auth.domain.entities.principal import Principal
from clockwork_auth.domain.exceptions import EmailAlreadyRegisteredException
from clockwork_auth.domain.repositories.principal_repository import IPrincipalRepository
from clockwork_auth.infrastructure.persistence.models.principal_model import PrincipalModel


class PrincipalRepository(IPrincipalRepository):
    """
    SQLAlchemy implementation of IPrincipalRepository.

    It returns domain entities, never exposing ORM models to the
    application layer. The session (and so the transaction) is owned by
    the UnitOfWork.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with a database session.

        Args:
            session: SQLAlchemy async session (managed by UoW)
        """
        self._session = session

    async def _get_model(self, id: int) -> Optional[PrincipalModel]:
        result = await self._session.execute(
            select(PrincipalModel).where(PrincipalModel.id == id)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, id: int) -> Optional[Principal]:
        """Get principal by ID."""
        model = await self._get_model(id)
        if model is None:
            return None
        return model.to_entity()

    async def add(self, entity: Principal) -> Principal:
        """
        Insert a new principal.

        Note: We convert domain entity -> ORM model, flush to obtain the
        generated ID, then convert back to domain entity.

        Raises:
            EmailAlreadyRegisteredException: A concurrent signup inserted the same email
        """
        model = PrincipalModel.from_entity(entity)

        self._session.add(model)
        try:
            await self._session.flush()  # Get generated ID without committing
        except IntegrityError as e:
            raise EmailAlreadyRegisteredException() from e
        await self._session.refresh(model)  # Refresh timestamps

        return model.to_entity()

    async def update(self, entity: Principal) -> Principal:
        """Persist password and 2FA changes of an existing principal."""
        if entity.id is None:
            raise ValueError("Cannot update principal without ID")

        model = await self._get_model(entity.id)
        if model is None:
            raise ValueError(f"Principal with ID {entity.id} not found")

        model.apply(entity)

        await self._session.flush()
        await self._session.refresh(model)

        return model.to_entity()

    async def get_by_email(self, email: str) -> Optional[Principal]:
        """Get principal by (normalized) email address."""
        result = await self._session.execute(
            select(PrincipalModel).where(PrincipalModel.email == email)
        )
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return model.to_entity()

    async def email_exists(self, email: str) -> bool:
        """Check if email is already registered."""
        result = await self._session.execute(
            select(PrincipalModel.id).where(PrincipalModel.email == email)
        )
        return result.scalar_one_or_none() is not None
