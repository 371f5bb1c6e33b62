"""Per-user bridge metadata kept in the local store."""

from datetime import datetime
from typing import Any
from uuid import UUID

from bridge.domain.identity.value_objects.sync_source import SyncSource
from bridge.domain.identity.value_objects.sync_status import SyncStatus
from bridge.domain.shared.time import utc_now


class SyncState:
    """
    Local store's view of a user's bridge state.

    Holds the cached session token, login and sync timestamps, the status
    of the last sync, why the mapping exists, and the last metadata
    snapshot received from the provider.
    """

    def __init__(  # NOQA: PLR0913
        self,
        local_user_id: UUID,
        session_token: str | None = None,
        last_login_at: datetime | None = None,
        last_synced_at: datetime | None = None,
        sync_status: SyncStatus | str | None = None,
        sync_source: SyncSource | str | None = None,
        metadata_snapshot: dict[str, Any] | None = None,
        last_error: str | None = None,
        updated_at: datetime | None = None,
    ):
        self._local_user_id = local_user_id
        self._session_token = session_token
        self._last_login_at = last_login_at
        self._last_synced_at = last_synced_at
        self._sync_status = SyncStatus(sync_status) if sync_status else None
        self._sync_source = SyncSource(sync_source) if sync_source else None
        self._metadata_snapshot = metadata_snapshot
        self._last_error = last_error
        self._updated_at = updated_at or utc_now()

    @property
    def local_user_id(self) -> UUID:
        return self._local_user_id

    @property
    def session_token(self) -> str | None:
        return self._session_token

    @property
    def last_login_at(self) -> datetime | None:
        return self._last_login_at

    @property
    def last_synced_at(self) -> datetime | None:
        return self._last_synced_at

    @property
    def sync_status(self) -> SyncStatus | None:
        return self._sync_status

    @property
    def sync_source(self) -> SyncSource | None:
        return self._sync_source

    @property
    def metadata_snapshot(self) -> dict[str, Any] | None:
        return self._metadata_snapshot

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def is_locked(self) -> bool:
        return self._sync_source == SyncSource.LOCKED

    def has_session_token(self, token: str) -> bool:
        return self._session_token is not None and self._session_token == token

    def cache_session(self, token: str, logged_in_at: datetime | None = None) -> None:
        self._session_token = token
        self._last_login_at = logged_in_at or utc_now()
        self._touch()

    def clear_session(self) -> None:
        self._session_token = None
        self._touch()

    def mark_synced(self, synced_at: datetime | None = None) -> None:
        self._last_synced_at = synced_at or utc_now()
        self._sync_status = SyncStatus.SYNCED
        self._last_error = None
        self._touch()

    def mark_failed(self, message: str) -> None:
        self._sync_status = SyncStatus.SYNC_FAILED
        self._last_error = message
        self._touch()

    def tag_source(self, source: SyncSource) -> None:
        # A locked user keeps the lock until an admin clears it explicitly
        if self.is_locked and source != SyncSource.LOCKED:
            return
        self._sync_source = source
        self._touch()

    def unlock(self, fallback: SyncSource | None = SyncSource.MANUAL) -> None:
        if not self.is_locked:
            return
        self._sync_source = fallback
        self._touch()

    def record_snapshot(self, snapshot: dict[str, Any]) -> None:
        self._metadata_snapshot = dict(snapshot)
        self._touch()

    def _touch(self) -> None:
        self._updated_at = utc_now()

    @classmethod
    def empty(cls, local_user_id: UUID) -> "SyncState":
        return cls(local_user_id=local_user_id)

    def __repr__(self) -> str:
        return (
            f"SyncState(user={self._local_user_id}, "
            f"status={self._sync_status}, source={self._sync_source})"
        )
