"""Sync state repository interface."""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from bridge.domain.identity.entities.sync_state import SyncState


class SyncStateRepository(ABC):
    """Repository interface for per-user bridge metadata."""

    @abstractmethod
    async def find(self, local_user_id: UUID) -> Optional[SyncState]:
        """Find the state of a user, if any was recorded."""

    @abstractmethod
    async def find_by_session_token(self, token: str) -> Optional[SyncState]:
        """Find the state whose cached session token matches."""

    @abstractmethod
    async def save(self, state: SyncState) -> None:
        """Insert or update a state."""

    @abstractmethod
    async def delete(self, local_user_id: UUID) -> None:
        """Delete the state of a user."""

    @abstractmethod
    async def list_with_session(self) -> list[SyncState]:
        """List states that hold a cached session token."""

    async def get_or_create(self, local_user_id: UUID) -> SyncState:
        state = await self.find(local_user_id)
        return state if state is not None else SyncState.empty(local_user_id)
