"""Domain events raised by the bridge.

Observers subscribe to these through the application's DomainEventPublisher.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from bridge.domain.shared.time import utc_now


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for all bridge events."""

    occurred_at: datetime = field(default_factory=utc_now)

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        data = {
            key: str(value) if isinstance(value, UUID) else value
            for key, value in self.__dict__.items()
        }
        data["occurred_at"] = self.occurred_at.isoformat()
        data["event"] = self.name
        return data


@dataclass(frozen=True, kw_only=True)
class IdentityLinked(DomainEvent):
    local_user_id: UUID
    provider_user_id: str
    source: str


@dataclass(frozen=True, kw_only=True)
class IdentityUnlinked(DomainEvent):
    local_user_id: UUID
    provider_user_id: str


@dataclass(frozen=True, kw_only=True)
class LocalSessionCreated(DomainEvent):
    local_user_id: UUID
    provider_user_id: str
    expires_at: datetime


@dataclass(frozen=True, kw_only=True)
class SessionRefreshed(DomainEvent):
    """A provider token replaced the cached session of a user."""

    local_user_id: UUID
    provider_user_id: str
    remote_verified: bool


@dataclass(frozen=True, kw_only=True)
class LocalSessionEnded(DomainEvent):
    local_user_id: UUID


@dataclass(frozen=True, kw_only=True)
class ProfileSynced(DomainEvent):
    local_user_id: UUID
    provider_user_id: str


@dataclass(frozen=True, kw_only=True)
class ProfileSyncFailed(DomainEvent):
    local_user_id: UUID
    error_code: str
    message: str


@dataclass(frozen=True, kw_only=True)
class ProviderSessionCreated(DomainEvent):
    """A session was opened on the auth provider side."""

    local_user_id: UUID
    provider_user_id: str


@dataclass(frozen=True, kw_only=True)
class ProviderSessionEnded(DomainEvent):
    local_user_id: UUID
    provider_user_id: str


@dataclass(frozen=True, kw_only=True)
class ProviderUserUpdated(DomainEvent):
    local_user_id: UUID
    provider_user_id: str
    roles: tuple[str, ...] = ()
    changed_fields: tuple[str, ...] = ()


@dataclass(frozen=True, kw_only=True)
class ProviderUserDeleted(DomainEvent):
    local_user_id: UUID
    provider_user_id: str
