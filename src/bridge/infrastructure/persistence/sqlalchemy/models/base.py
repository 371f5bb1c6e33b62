"""SQLAlchemy base configuration.

The local store and the auth provider store are separate databases, so
each gets its own declarative base and metadata.
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from bridge.domain.shared.time import utc_now


class LocalBase(DeclarativeBase):
    """Base class for models in the local store."""


class ProviderBase(DeclarativeBase):
    """Base class for models in the auth provider store."""


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps (utc_now)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
