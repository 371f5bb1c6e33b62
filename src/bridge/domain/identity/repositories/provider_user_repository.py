"""Auth provider user repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from bridge.domain.identity.entities.provider_user import ProviderUser


class ProviderUserRepository(ABC):
    """Repository interface for users in the auth provider's store."""

    @abstractmethod
    async def find_by_id(self, provider_user_id: str) -> Optional[ProviderUser]:
        """Find a provider user by ID."""

    @abstractmethod
    async def username_exists(self, username: str) -> bool:
        """Check whether a provider username is taken."""

    @abstractmethod
    async def save(self, user: ProviderUser) -> None:
        """Insert or update a provider user."""

    @abstractmethod
    async def upsert_meta(self, provider_user_id: str, key: str, value: str) -> None:
        """Insert or replace one metadata row of a provider user."""

    @abstractmethod
    async def get_meta(self, provider_user_id: str, key: str) -> Optional[str]:
        """Read one metadata row of a provider user."""
