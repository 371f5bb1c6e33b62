"""DTOs for profile sync and bulk reconciliation."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class SyncResult:
    """Result of pushing one local user's profile to the provider."""

    local_user_id: UUID
    provider_user_id: str
    synced_at: datetime
    created_mapping: bool = False

    def to_dict(self) -> dict:
        return {
            "local_user_id": str(self.local_user_id),
            "provider_user_id": self.provider_user_id,
            "synced_at": self.synced_at.isoformat(),
            "created_mapping": self.created_mapping,
            "sync_status": "synced",
        }


@dataclass(frozen=True)
class BulkSyncEntry:
    """One user's outcome in a bulk run."""

    user_ref: str
    email: Optional[str] = None
    provider_user_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class BulkSyncResult:
    """Outcome buckets of a bulk reconciliation.

    Every processed user lands in exactly one of the three lists.
    """

    started_at: datetime
    synced: list[BulkSyncEntry] = field(default_factory=list)
    skipped: list[BulkSyncEntry] = field(default_factory=list)
    failed: list[BulkSyncEntry] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.synced) + len(self.skipped) + len(self.failed)

    @property
    def success(self) -> bool:
        return not self.failed

    def add_synced(self, entry: BulkSyncEntry) -> None:
        self.synced.append(entry)

    def add_skipped(self, entry: BulkSyncEntry) -> None:
        self.skipped.append(entry)

    def add_failed(self, entry: BulkSyncEntry) -> None:
        self.failed.append(entry)

    def to_dict(self) -> dict:
        def _entry(e: BulkSyncEntry) -> dict:
            data = {
                "user": e.user_ref,
                "email": e.email,
                "provider_user_id": e.provider_user_id,
            }
            if e.error is not None:
                data["error"] = e.error
            return data

        return {
            "success": self.success,
            "started_at": self.started_at.isoformat(),
            "total": self.total,
            "synced": [_entry(e) for e in self.synced],
            "skipped": [_entry(e) for e in self.skipped],
            "failed": [_entry(e) for e in self.failed],
        }
