"""Account provisioner interface.

Business modules (nutrition, billing, ...) may need default records for
every new account, e.g. an empty nutrition plan for principals holding
the "client" role. Provisioners run inside the signup unit of work, so
the principal and its defaults are committed or rolled back together.
"""

from abc import ABC, abstractmethod

from clockwork_auth.domain.entities.principal import Principal
from clockwork_auth.domain.repositories.unit_of_work import IUnitOfWork


class IAccountProvisioner(ABC):
    """Creates domain-default records for a freshly inserted principal."""

    @abstractmethod
    async def provision(self, uow: IUnitOfWork, principal: Principal) -> None:
        """
        Create default records for `principal` through `uow`.

        Raising aborts the whole signup.
        """
        pass
