"""SQLAlchemy model for Session entities."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from bridge.domain.shared.time import utc_now
from bridge.infrastructure.persistence.sqlalchemy.models.base import ProviderBase


class SessionModel(ProviderBase):
    """
    A login session in the auth provider's store.

    Table: sessions
    """

    __tablename__ = "sessions"

    token: Mapped[str] = mapped_column(String(128), primary_key=True)
    provider_user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    revoked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<SessionModel(provider_user_id={self.provider_user_id}, "
            f"expires_at={self.expires_at}, revoked={self.revoked})>"
        )
