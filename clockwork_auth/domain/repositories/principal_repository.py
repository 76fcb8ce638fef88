"""Principal repository interface (the credential store)."""

from abc import abstractmethod

from clockwork_auth.domain.entities.principal import Principal
from clockwork_auth.domain.repositories.base import IRepository


class IPrincipalRepository(IRepository[Principal]):
    """
    Credential store contract.

    Email lookups are case-insensitive: implementations receive emails
    already normalized by the caller, and store them normalized.
    """

    @abstractmethod
    async def get_by_email(self, email: str) -> Principal | None:
        """
        Find a principal by email address.

        Args:
            email: Normalized (lowercase) email

        Returns:
            Principal if found, None otherwise
        """
        pass

    @abstractmethod
    async def email_exists(self, email: str) -> bool:
        """
        Check if an email is already registered.

        Args:
            email: Normalized (lowercase) email

        Returns:
            True if email exists, False otherwise
        """
        pass
