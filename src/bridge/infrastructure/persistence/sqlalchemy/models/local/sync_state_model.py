"""SQLAlchemy model for per-user bridge state."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from bridge.infrastructure.persistence.sqlalchemy.models.base import LocalBase


class SyncStateModel(LocalBase):
    """
    Bridge metadata of one local user.

    Not a foreign key to local_users: the row is removed explicitly on
    unsync and on user deletion.

    Table: sync_states
    """

    __tablename__ = "sync_states"

    local_user_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)

    session_token: Mapped[Optional[str]] = mapped_column(
        String(512),
        nullable=True,
        index=True,
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    last_synced_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # synced | sync_failed
    sync_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    # manual | policy | locked | provider
    sync_source: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    last_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Last metadata received from the provider, kept for audit
    metadata_snapshot: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<SyncStateModel(local_user_id={self.local_user_id}, "
            f"status={self.sync_status}, source={self.sync_source})>"
        )
