"""SQLAlchemy model for the persisted auto-sync role set."""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from bridge.infrastructure.persistence.sqlalchemy.models.base import (
    LocalBase,
    TimestampMixin,
)

POLICY_ROW_ID = 1


class AutoSyncPolicyModel(LocalBase, TimestampMixin):
    """
    Single-row table holding the auto-sync roles.

    Table: auto_sync_policy
    """

    __tablename__ = "auto_sync_policy"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=POLICY_ROW_ID)
    auto_sync_roles: Mapped[list[str]] = mapped_column(JSON, nullable=False)

    def __repr__(self) -> str:
        return f"<AutoSyncPolicyModel(roles={self.auto_sync_roles})>"
