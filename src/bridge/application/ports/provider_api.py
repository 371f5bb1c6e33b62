"""Auth provider API port.

Abstracts the provider's HTTP API so the application layer stays
independent of the client library and wire format.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ProviderSessionGrant:
    """A session the provider issued on request."""

    token: str
    expires_at: datetime | None = None


@dataclass(frozen=True)
class ProviderDirectoryUser:
    """One entry of the provider's user list."""

    provider_user_id: str
    email: str | None
    name: str | None = None
    roles: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)


class ProviderApiPort(ABC):
    """Outbound operations against the auth provider.

    Implementations raise ProviderConnectionError when the provider cannot
    be reached or answers with a server error.
    """

    @abstractmethod
    async def verify_session(self, provider_user_id: str, token: str) -> bool:
        """Whether the provider holds a live session for user and token."""

    @abstractmethod
    async def create_session(self, provider_user_id: str) -> ProviderSessionGrant:
        """Ask the provider to open a session for a user."""

    @abstractmethod
    async def list_users(self) -> list[ProviderDirectoryUser]:
        """Fetch the provider's user directory."""
