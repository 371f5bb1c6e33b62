"""SQLAlchemy models for auth provider users and their metadata rows."""

from typing import Any, Optional

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from bridge.infrastructure.persistence.sqlalchemy.models.base import (
    ProviderBase,
    TimestampMixin,
)


class ProviderUserModel(ProviderBase, TimestampMixin):
    """
    A user record in the auth provider's store.

    Table: provider_users
    """

    __tablename__ = "provider_users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    user_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column(
        "metadata",
        JSON,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<ProviderUserModel(id={self.id}, username={self.username})>"


class ProviderUserMetaModel(ProviderBase):
    """
    Key/value metadata rows of a provider user.

    Table: provider_user_meta
    """

    __tablename__ = "provider_user_meta"

    __table_args__ = (
        UniqueConstraint("provider_user_id", "meta_key", name="uq_meta_user_key"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    provider_user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("provider_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    meta_key: Mapped[str] = mapped_column(String(100), nullable=False)
    meta_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<ProviderUserMetaModel(user={self.provider_user_id}, "
            f"key={self.meta_key})>"
        )
