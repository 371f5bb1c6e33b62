"""SQLAlchemy model for the LocalUser aggregate."""

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from bridge.infrastructure.persistence.sqlalchemy.models.base import (
    LocalBase,
    TimestampMixin,
)


class LocalUserModel(LocalBase, TimestampMixin):
    """
    SQLAlchemy model for persisting LocalUser aggregates.

    Roles are stored as a JSON list of role names. Profile entries that
    have no dedicated column live in the ``profile`` JSON column.

    Table: local_users
    """

    __tablename__ = "local_users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    roles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    locale: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    nickname: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    profile: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<LocalUserModel(id={self.id}, username={self.username})>"
