"""Pydantic schemas for API request/response models."""

from bridge.presentation.api.schemas.admin import (
    ActiveSessionListResponse,
    ActiveSessionResponse,
    BulkSyncEntryResponse,
    BulkSyncResponse,
    PolicyFailureResponse,
    PolicyResponse,
    PolicyUpdateRequest,
    PolicyUpdateResponse,
    SessionCleanupResponse,
    SyncResultResponse,
    SyncStatusResponse,
    UnsyncResponse,
)
from bridge.presentation.api.schemas.bridge import (
    CurrentUserResponse,
    LocalSessionRequest,
    LocalSessionResponse,
    RemoteUserRequest,
    RemoteUserResponse,
    TokenExchangeResponse,
)
from bridge.presentation.api.schemas.events import EventResultResponse
from bridge.presentation.api.schemas.sessions import (
    SessionCheckResponse,
    SessionEndResponse,
)

__all__ = [
    "ActiveSessionListResponse",
    "ActiveSessionResponse",
    "BulkSyncEntryResponse",
    "BulkSyncResponse",
    "CurrentUserResponse",
    "EventResultResponse",
    "LocalSessionRequest",
    "LocalSessionResponse",
    "PolicyFailureResponse",
    "PolicyResponse",
    "PolicyUpdateRequest",
    "PolicyUpdateResponse",
    "RemoteUserRequest",
    "RemoteUserResponse",
    "SessionCheckResponse",
    "SessionCleanupResponse",
    "SessionEndResponse",
    "SyncResultResponse",
    "SyncStatusResponse",
    "TokenExchangeResponse",
    "UnsyncResponse",
]
