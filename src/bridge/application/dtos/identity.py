"""DTOs for identity mapping operations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import UUID


@dataclass(frozen=True)
class ProviderLink:
    """Result of ensuring a provider user for a local user."""

    local_user_id: UUID
    provider_user_id: str
    created: bool


@dataclass(frozen=True)
class LocalLink:
    """Result of linking inbound provider data to a local user."""

    local_user_id: UUID
    provider_user_id: str
    created: bool = False  # a new local user was created
    linked: bool = False  # a new mapping was created


@dataclass(frozen=True)
class ProviderUserData:
    """Inbound user data from the auth provider."""

    provider_user_id: Optional[str]
    email: Optional[str]
    name: Optional[str] = None
    roles: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SyncStatusInfo:
    """Read model of a user's bridge state for admin reporting."""

    local_user_id: UUID
    provider_user_id: Optional[str]
    sync_status: Optional[str]
    sync_source: Optional[str]
    last_synced_at: Optional[datetime]
    last_login_at: Optional[datetime]
    last_error: Optional[str] = None

    @property
    def linked(self) -> bool:
        return self.provider_user_id is not None

    def to_dict(self) -> dict:
        return {
            "local_user_id": str(self.local_user_id),
            "provider_user_id": self.provider_user_id,
            "linked": self.linked,
            "sync_status": self.sync_status,
            "sync_source": self.sync_source,
            "last_synced_at": (
                self.last_synced_at.isoformat() if self.last_synced_at else None
            ),
            "last_login_at": (
                self.last_login_at.isoformat() if self.last_login_at else None
            ),
            "last_error": self.last_error,
        }
