"""Principal DTO returned in successful authentication payloads."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from clockwork_auth.domain.entities.principal import Principal


class PrincipalDTO(BaseModel):
    """Public profile of an authenticated principal (never includes secrets)."""

    id: int
    email: str
    name: str
    phone: Optional[str] = None
    roles: list[str]
    two_factor_enabled: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, principal: Principal) -> "PrincipalDTO":
        """
        Convert a PERSISTED principal to DTO.

        Raises:
            ValueError: If the entity has not been persisted (no id)
        """
        if principal.id is None:
            raise ValueError(
                "Cannot create PrincipalDTO from non-persisted entity: missing id. "
                "Ensure the entity has been saved via repository before converting to DTO."
            )

        return cls(
            id=principal.id,
            email=principal.email,
            name=principal.name,
            phone=principal.phone,
            roles=sorted(principal.roles),
            two_factor_enabled=principal.two_factor_enabled,
            created_at=principal.created_at,
        )
