"""Local user repository interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional
from uuid import UUID

from bridge.domain.identity.aggregates.local_user import LocalUser
from bridge.domain.identity.value_objects.local_role import LocalRole


class LocalUserRepository(ABC):
    """Repository interface for LocalUser aggregates."""

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[LocalUser]:
        """Find a user by their ID."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[LocalUser]:
        """Find a user by email address (case-insensitive)."""

    @abstractmethod
    async def username_exists(self, username: str) -> bool:
        """Check whether a username is taken."""

    @abstractmethod
    async def save(self, user: LocalUser) -> None:
        """Save or update a user."""

    @abstractmethod
    async def delete(self, user_id: UUID) -> None:
        """Delete a user by ID."""

    @abstractmethod
    async def list_all(self) -> list[LocalUser]:
        """List all users ordered by creation time."""

    @abstractmethod
    async def list_with_any_role(self, roles: Iterable[LocalRole]) -> list[LocalUser]:
        """List users holding at least one of the given roles."""
