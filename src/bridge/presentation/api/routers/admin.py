"""Admin endpoints for sync control, the auto-sync policy and sessions."""

import logging
from uuid import UUID

from fastapi import APIRouter, status

from bridge.domain.identity import LocalRole, SyncSource
from bridge.domain.policy import AutoSyncPolicy
from bridge.domain.shared.exceptions import ExternalServiceError
from bridge.presentation.api.dependencies import (
    AdminUser,
    LocalSession,
    Mapper,
    Orchestrator,
    PolicyEngine,
    SessionManager,
)
from bridge.presentation.api.schemas import (
    ActiveSessionListResponse,
    ActiveSessionResponse,
    BulkSyncResponse,
    PolicyResponse,
    PolicyUpdateRequest,
    PolicyUpdateResponse,
    SessionCleanupResponse,
    SyncResultResponse,
    SyncStatusResponse,
    UnsyncResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")


def _policy_response(policy: AutoSyncPolicy) -> PolicyResponse:
    return PolicyResponse(
        auto_sync_roles=sorted(role.value for role in policy.auto_sync_roles),
        locked_roles=sorted(role.value for role in policy.locked_roles),
    )


# -----------------------------------------------------------------------------
# Per-user sync
# -----------------------------------------------------------------------------


@router.post(
    "/sync/users/{user_id}",
    summary="Sync a user to the auth provider",
    responses={
        200: {"description": "User synced"},
        403: {"description": "Admin access required"},
        404: {"description": "User not found"},
        502: {"description": "Provider write failed"},
        503: {"description": "Auth provider unreachable"},
    },
)
async def sync_user(
    user_id: UUID,
    admin: AdminUser,
    orchestrator: Orchestrator,
    session: LocalSession,
) -> SyncResultResponse:
    """Create the provider user if needed and push the local profile."""
    try:
        result = await orchestrator.push_profile_sync(user_id, source=SyncSource.MANUAL)
    except ExternalServiceError:
        # Keep the recorded sync_failed state
        await session.commit()
        raise
    await session.commit()

    logger.info("Admin %s synced user %s", admin.email, user_id)
    return SyncResultResponse(**result.to_dict())


@router.delete(
    "/sync/users/{user_id}",
    summary="Remove a user's provider link",
    responses={
        200: {"description": "User unsynced"},
        403: {"description": "Admin access required"},
        409: {"description": "User is not linked"},
    },
)
async def unsync_user(
    user_id: UUID,
    admin: AdminUser,
    mapper: Mapper,
    session: LocalSession,
) -> UnsyncResponse:
    await mapper.unsync(user_id)
    await session.commit()

    logger.info("Admin %s unsynced user %s", admin.email, user_id)
    return UnsyncResponse(local_user_id=user_id)


@router.get(
    "/sync/users/{user_id}",
    summary="Get a user's sync status",
    responses={
        200: {"description": "Sync status"},
        403: {"description": "Admin access required"},
        404: {"description": "User not found"},
    },
)
async def get_sync_status(
    user_id: UUID,
    _admin: AdminUser,  # Used for authorization check
    orchestrator: Orchestrator,
) -> SyncStatusResponse:
    info = await orchestrator.get_sync_status(user_id)
    return SyncStatusResponse(**info.to_dict())


@router.post(
    "/sync/users/{user_id}/lock",
    summary="Exclude a user from policy decisions",
    responses={
        200: {"description": "User locked"},
        403: {"description": "Admin access required"},
        404: {"description": "User not found"},
    },
)
async def lock_user(
    user_id: UUID,
    admin: AdminUser,
    policy_engine: PolicyEngine,
    session: LocalSession,
) -> SyncStatusResponse:
    info = await policy_engine.lock_user(user_id)
    await session.commit()

    logger.info("Admin %s locked user %s", admin.email, user_id)
    return SyncStatusResponse(**info.to_dict())


@router.delete(
    "/sync/users/{user_id}/lock",
    summary="Return a user to policy control",
    responses={
        200: {"description": "User unlocked"},
        403: {"description": "Admin access required"},
        404: {"description": "User not found"},
    },
)
async def unlock_user(
    user_id: UUID,
    admin: AdminUser,
    policy_engine: PolicyEngine,
    session: LocalSession,
) -> SyncStatusResponse:
    info = await policy_engine.unlock_user(user_id)
    await session.commit()

    logger.info("Admin %s unlocked user %s", admin.email, user_id)
    return SyncStatusResponse(**info.to_dict())


# -----------------------------------------------------------------------------
# Bulk operations
# -----------------------------------------------------------------------------


@router.post(
    "/sync/bulk",
    summary="Ensure a provider user for every local user",
    responses={
        200: {"description": "Per-user outcome buckets"},
        403: {"description": "Admin access required"},
    },
)
async def bulk_sync(
    admin: AdminUser,
    orchestrator: Orchestrator,
    session: LocalSession,
) -> BulkSyncResponse:
    """Safe to re-run: users already mapped are reported as skipped."""
    result = await orchestrator.bulk_sync_all(SyncSource.MANUAL)
    await session.commit()

    logger.info(
        "Admin %s ran bulk sync: %d synced, %d skipped, %d failed",
        admin.email,
        len(result.synced),
        len(result.skipped),
        len(result.failed),
    )
    return BulkSyncResponse(**result.to_dict())


@router.post(
    "/sync/pull",
    summary="Link local users for every provider user",
    responses={
        200: {"description": "Per-user outcome buckets"},
        403: {"description": "Admin access required"},
        503: {"description": "Auth provider unreachable"},
    },
)
async def pull_directory(
    admin: AdminUser,
    orchestrator: Orchestrator,
    session: LocalSession,
) -> BulkSyncResponse:
    result = await orchestrator.pull_provider_directory()
    await session.commit()

    logger.info(
        "Admin %s pulled provider directory (%d users)",
        admin.email,
        result.total,
    )
    return BulkSyncResponse(**result.to_dict())


# -----------------------------------------------------------------------------
# Auto-sync policy
# -----------------------------------------------------------------------------


@router.get(
    "/policy",
    summary="Get the auto-sync policy",
    responses={
        200: {"description": "Current policy"},
        403: {"description": "Admin access required"},
    },
)
async def get_policy(
    _admin: AdminUser,  # Used for authorization check
    policy_engine: PolicyEngine,
) -> PolicyResponse:
    return _policy_response(await policy_engine.get_policy())


@router.put(
    "/policy",
    summary="Replace the auto-sync role set",
    responses={
        200: {"description": "Policy updated and applied to existing users"},
        400: {"description": "Unknown role"},
        403: {"description": "Admin access required"},
        422: {"description": "Every requested role is locked"},
    },
)
async def update_policy(
    request: PolicyUpdateRequest,
    admin: AdminUser,
    policy_engine: PolicyEngine,
    session: LocalSession,
) -> PolicyUpdateResponse:
    """
    Persist the new role set, then sync users with newly added roles and
    unsync policy-synced users whose roles were removed.
    """
    result = await policy_engine.update_policy(request.roles)
    await session.commit()

    logger.info("Admin %s updated auto-sync roles to %s", admin.email, request.roles)
    return PolicyUpdateResponse(
        policy=_policy_response(await policy_engine.get_policy()),
        **result.to_dict(),
    )


# -----------------------------------------------------------------------------
# Sessions
# -----------------------------------------------------------------------------


@router.get(
    "/sessions/active",
    summary="List users with an active session",
    responses={
        200: {"description": "Users with a cached session token"},
        403: {"description": "Admin access required"},
    },
)
async def list_active_sessions(
    _admin: AdminUser,  # Used for authorization check
    manager: SessionManager,
    policy_engine: PolicyEngine,
) -> ActiveSessionListResponse:
    """Only users holding an auto-sync role are listed."""
    policy = await policy_engine.get_policy()
    roles: frozenset[LocalRole] = policy.auto_sync_roles
    entries = await manager.list_active_sessions(roles)
    return ActiveSessionListResponse(
        sessions=[
            ActiveSessionResponse(
                local_user_id=e.local_user_id,
                email=e.email,
                username=e.username,
                display_name=e.display_name,
                roles=list(e.roles),
                provider_user_id=e.provider_user_id,
                last_login_at=e.last_login_at,
            )
            for e in entries
        ],
        total=len(entries),
    )


@router.post(
    "/sessions/cleanup",
    status_code=status.HTTP_200_OK,
    summary="Delete expired sessions",
    responses={
        200: {"description": "Number of removed sessions"},
        403: {"description": "Admin access required"},
    },
)
async def cleanup_sessions(
    admin: AdminUser,
    manager: SessionManager,
) -> SessionCleanupResponse:
    removed = await manager.cleanup_expired_sessions()
    logger.info("Admin %s removed %d expired sessions", admin.email, removed)
    return SessionCleanupResponse(removed=removed)
