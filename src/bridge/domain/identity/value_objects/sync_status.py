"""Outcome of the most recent profile sync."""

from enum import Enum


class SyncStatus(str, Enum):
    SYNCED = "synced"
    SYNC_FAILED = "sync_failed"
