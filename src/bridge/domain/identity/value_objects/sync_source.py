"""Why an identity mapping exists."""

from enum import Enum


class SyncSource(str, Enum):
    """Origin tag recorded for every mapping.

    Only POLICY mappings are reversed when the auto-sync policy changes.
    LOCKED users are excluded from policy decisions altogether.
    """

    MANUAL = "manual"
    POLICY = "policy"
    LOCKED = "locked"
    PROVIDER = "provider"

    @property
    def reversible_by_policy(self) -> bool:
        return self == SyncSource.POLICY
