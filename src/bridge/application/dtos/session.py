"""DTOs for session lifecycle operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from bridge.domain.identity.value_objects import SyncStatus


@dataclass(frozen=True)
class SessionInfo:
    local_user_id: UUID
    provider_user_id: str
    token: str
    created_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenValidationResult:
    """Resolved identity behind a validated provider token."""

    local_user_id: UUID
    provider_user_id: str
    email: str
    username: str
    display_name: str
    roles: tuple[str, ...]
    sync_status: SyncStatus
    remote_verified: bool
    session_refreshed: bool = False


@dataclass(frozen=True)
class TokenExchange:
    local_user_id: UUID
    local_token: str
    provider_token: str
    expires_at: datetime


@dataclass(frozen=True)
class SessionCheck:
    logged_in: bool
    session_token: Optional[str] = None
    user_id: Optional[UUID] = None

    @classmethod
    def anonymous(cls) -> "SessionCheck":
        return cls(logged_in=False)


@dataclass(frozen=True)
class ActiveSessionEntry:
    """A user with a cached session, for the admin report."""

    local_user_id: UUID
    email: str
    username: str
    display_name: str
    roles: tuple[str, ...]
    provider_user_id: Optional[str]
    last_login_at: Optional[datetime]
