"""SQLAlchemy model for IdentityMapping entities."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from bridge.domain.shared.time import utc_now
from bridge.infrastructure.persistence.sqlalchemy.models.base import ProviderBase


class IdentityMappingModel(ProviderBase):
    """
    Links a local user id to a provider user id, strictly 1:1.

    Both columns are unique so a concurrent second insert for either side
    fails instead of creating a duplicate. There is no foreign key to
    provider_users: the provider record may be recreated by a later sync.

    Table: identity_mappings
    """

    __tablename__ = "identity_mappings"

    __table_args__ = (
        UniqueConstraint("local_user_id", name="uq_mapping_local_user"),
        UniqueConstraint("provider_user_id", name="uq_mapping_provider_user"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    local_user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    provider_user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<IdentityMappingModel(local={self.local_user_id}, "
            f"provider={self.provider_user_id})>"
        )
