"""Auto-sync policy repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from bridge.domain.identity.value_objects.local_role import LocalRole


class AutoSyncPolicyRepository(ABC):
    """Persists the configured auto-sync role set.

    Locked roles are not persisted, they come from configuration.
    """

    @abstractmethod
    async def get_auto_sync_roles(self) -> Optional[frozenset[LocalRole]]:
        """Return the stored role set, or None if never configured."""

    @abstractmethod
    async def save_auto_sync_roles(self, roles: frozenset[LocalRole]) -> None:
        """Replace the stored role set."""
