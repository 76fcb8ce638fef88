"""Base repository interfaces following Clean Architecture."""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

# Generic type for domain entities
T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """
    Base repository interface for entities addressed by integer id.

    Only the operations the authentication flows need are declared here;
    listing and deletion of accounts belong to the account-management side.

    Type Parameters:
        T: The domain entity type this repository manages
    """

    @abstractmethod
    async def get_by_id(self, id: int) -> Optional[T]:
        """
        Retrieve an entity by its ID.

        Args:
            id: The unique identifier

        Returns:
            The entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def add(self, entity: T) -> T:
        """
        Add a new entity.

        Args:
            entity: The entity to add

        Returns:
            The added entity with generated fields (like ID)
        """
        pass

    @abstractmethod
    async def update(self, entity: T) -> T:
        """
        Persist changes to an existing entity.

        Args:
            entity: The entity to update (must carry an ID)

        Returns:
            The updated entity
        """
        pass
