"""Auto-sync policy value object."""

from dataclasses import dataclass
from typing import Iterable

from bridge.domain.identity.value_objects.local_role import LocalRole


@dataclass(frozen=True)
class PolicyDiff:
    added: frozenset[LocalRole]
    removed: frozenset[LocalRole]

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed


@dataclass(frozen=True)
class AutoSyncPolicy:
    """Which roles are synced automatically.

    ``locked_roles`` is fixed by configuration and always disjoint from
    ``auto_sync_roles``.
    """

    auto_sync_roles: frozenset[LocalRole]
    locked_roles: frozenset[LocalRole] = frozenset()

    def __post_init__(self) -> None:
        overlap = self.auto_sync_roles & self.locked_roles
        if overlap:
            msg = f"Locked roles in auto-sync set: {sorted(r.value for r in overlap)}"
            raise ValueError(msg)

    @classmethod
    def build(
        cls,
        requested: Iterable[LocalRole],
        locked: Iterable[LocalRole],
    ) -> tuple["AutoSyncPolicy", frozenset[LocalRole]]:
        """Build a policy, filtering out locked roles.

        Returns the policy and the roles that were rejected.
        """
        requested = frozenset(requested)
        locked = frozenset(locked)
        return cls(requested - locked, locked), requested & locked

    def should_auto_sync(self, roles: Iterable[LocalRole]) -> bool:
        return not self.auto_sync_roles.isdisjoint(roles)

    def diff_from(self, old_roles: Iterable[LocalRole]) -> PolicyDiff:
        old = frozenset(old_roles)
        return PolicyDiff(
            added=self.auto_sync_roles - old,
            removed=old - self.auto_sync_roles,
        )
