"""Principal ORM model - infrastructure layer SQLAlchemy mapping."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, String, func
from sqlalchemy.orm import Mapped, mapped_column

from clockwork_auth.domain.entities.principal import Principal
from clockwork_auth.infrastructure.persistence.database import Base


class PrincipalModel(Base):
    """
    SQLAlchemy ORM model for the users table.

    Roles are stored as a sorted JSON array so the column works the same
    on PostgreSQL and SQLite. The domain layer never imports this class.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Identity (email is stored normalized, lowercase)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    roles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Authentication
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    two_factor_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    two_factor_secret: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        insert_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        insert_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"PrincipalModel(id={self.id!r}, email={self.email!r}, roles={self.roles!r})"

    def to_entity(self) -> Principal:
        """Convert ORM model to domain entity."""
        return Principal(
            id=self.id,
            email=self.email,
            name=self.name,
            phone=self.phone,
            roles=frozenset(self.roles or ()),
            password_hash=self.password_hash,
            two_factor_enabled=self.two_factor_enabled,
            two_factor_secret=self.two_factor_secret,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def apply(self, principal: Principal) -> None:
        """Copy the mutable fields of `principal` onto this row."""
        self.email = principal.email
        self.name = principal.name
        self.phone = principal.phone
        self.roles = sorted(principal.roles)
        self.password_hash = principal.password_hash
        self.two_factor_enabled = principal.two_factor_enabled
        self.two_factor_secret = principal.two_factor_secret

    @staticmethod
    def from_entity(principal: Principal) -> "PrincipalModel":
        """
        Create ORM model from domain entity.

        Args:
            principal: Domain entity

        Returns:
            ORM model ready for persistence
        """
        model = PrincipalModel()
        model.apply(principal)

        if principal.id is not None:
            model.id = principal.id
        if principal.created_at is not None:
            model.created_at = principal.created_at
        if principal.updated_at is not None:
            model.updated_at = principal.updated_at

        return model
