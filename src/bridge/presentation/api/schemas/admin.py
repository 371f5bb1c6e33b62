"""Schemas for the admin endpoints."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class SyncStatusResponse(BaseModel):
    """Bridge state of one local user."""

    local_user_id: UUID
    provider_user_id: Optional[str] = None
    linked: bool
    sync_status: Optional[str] = None
    sync_source: Optional[str] = None
    last_synced_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    last_error: Optional[str] = None


class SyncResultResponse(BaseModel):
    success: bool = True
    local_user_id: UUID
    provider_user_id: str
    synced_at: datetime
    created_mapping: bool
    sync_status: str = "synced"


class UnsyncResponse(BaseModel):
    success: bool = True
    local_user_id: UUID


class BulkSyncEntryResponse(BaseModel):
    user: str
    email: Optional[str] = None
    provider_user_id: Optional[str] = None
    error: Optional[str] = None


class BulkSyncResponse(BaseModel):
    """Outcome buckets of a bulk run."""

    success: bool
    started_at: datetime
    total: int
    synced: list[BulkSyncEntryResponse]
    skipped: list[BulkSyncEntryResponse]
    failed: list[BulkSyncEntryResponse]


class PolicyResponse(BaseModel):
    auto_sync_roles: list[str]
    locked_roles: list[str]


class PolicyUpdateRequest(BaseModel):
    """Request schema for replacing the auto-sync role set."""

    roles: list[str] = Field(
        ...,
        description="Roles to sync automatically; locked roles are rejected",
    )


class PolicyFailureResponse(BaseModel):
    user: str
    error: Optional[str] = None


class PolicyUpdateResponse(BaseModel):
    """Policy after the update and what the change did to existing users."""

    success: bool = True
    policy: PolicyResponse
    added_roles: list[str]
    removed_roles: list[str]
    rejected_roles: list[str]
    synced: list[str]
    unsynced: list[str]
    failed: list[PolicyFailureResponse]


class ActiveSessionResponse(BaseModel):
    local_user_id: UUID
    email: str
    username: str
    display_name: str
    roles: list[str]
    provider_user_id: Optional[str] = None
    last_login_at: Optional[datetime] = None


class ActiveSessionListResponse(BaseModel):
    sessions: list[ActiveSessionResponse]
    total: int


class SessionCleanupResponse(BaseModel):
    success: bool = True
    removed: int
