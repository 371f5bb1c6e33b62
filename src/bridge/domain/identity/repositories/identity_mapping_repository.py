"""Identity mapping repository interface."""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from bridge.domain.identity.entities.identity_mapping import IdentityMapping


class IdentityMappingRepository(ABC):
    """Repository interface for IdentityMapping entities.

    Implementations must enforce uniqueness of both local_user_id and
    provider_user_id and raise MappingAlreadyExistsError on violation.
    """

    @abstractmethod
    async def find_by_local_user_id(self, local_user_id: UUID) -> Optional[IdentityMapping]:
        """Find the mapping of a local user."""

    @abstractmethod
    async def find_by_provider_user_id(
        self,
        provider_user_id: str,
    ) -> Optional[IdentityMapping]:
        """Find the mapping of a provider user."""

    @abstractmethod
    async def add(self, mapping: IdentityMapping) -> None:
        """Insert a new mapping."""

    @abstractmethod
    async def delete(self, mapping: IdentityMapping) -> None:
        """Delete a mapping."""
