"""Session repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from bridge.domain.session.session import Session


class SessionRepository(ABC):
    """Repository interface for sessions in the auth provider store."""

    @abstractmethod
    async def find_by_token(self, token: str) -> Optional[Session]:
        """Find a session by its token."""

    @abstractmethod
    async def save(self, session: Session) -> None:
        """Insert or update a session."""

    @abstractmethod
    async def delete_for_provider_user(self, provider_user_id: str) -> int:
        """Delete all sessions of a provider user. Returns the count."""

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete sessions that expired before ``now``. Returns the count."""
