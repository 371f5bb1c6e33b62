"""DTOs for auto-sync policy changes."""

from dataclasses import dataclass, field

from bridge.application.dtos.sync import BulkSyncEntry


@dataclass
class PolicyChangeResult:
    """What a policy change did to existing users."""

    added_roles: list[str] = field(default_factory=list)
    removed_roles: list[str] = field(default_factory=list)
    rejected_roles: list[str] = field(default_factory=list)
    synced: list[BulkSyncEntry] = field(default_factory=list)
    unsynced: list[BulkSyncEntry] = field(default_factory=list)
    failed: list[BulkSyncEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "added_roles": self.added_roles,
            "removed_roles": self.removed_roles,
            "rejected_roles": self.rejected_roles,
            "synced": [e.user_ref for e in self.synced],
            "unsynced": [e.user_ref for e in self.unsynced],
            "failed": [{"user": e.user_ref, "error": e.error} for e in self.failed],
        }
