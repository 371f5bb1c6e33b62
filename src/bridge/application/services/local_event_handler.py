"""Route local user events into the policy engine and orchestrator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bridge.application.dtos.local_events import (
    LocalEvent,
    LocalEventResult,
    UserLoginEvent,
    UserProfileUpdatedEvent,
    UserRegisteredEvent,
    UserRoleChangedEvent,
)
from bridge.application.services.auto_sync_policy_engine import AutoSyncPolicyEngine
from bridge.application.services.sync_orchestrator import SyncOrchestrator
from bridge.domain.identity import (
    LocalRole,
    LocalUser,
    LocalUserNotFoundError,
    LocalUserRepository,
)
from bridge.domain.shared.exceptions import ConflictError, ValidationError

if TYPE_CHECKING:
    from uuid import UUID

    from bridge.application.factories import RepositoryFactory

logger = logging.getLogger(__name__)


class LocalEventHandler:
    """Entry point for registration, login, role and profile changes."""

    def __init__(
        self,
        local_users: LocalUserRepository,
        policy_engine: AutoSyncPolicyEngine,
        orchestrator: SyncOrchestrator,
    ):
        self._local_users = local_users
        self._policy = policy_engine
        self._orchestrator = orchestrator

    @classmethod
    def from_factory(
        cls,
        factory: RepositoryFactory,
        policy_engine: AutoSyncPolicyEngine,
        orchestrator: SyncOrchestrator,
    ) -> LocalEventHandler:
        return cls(
            local_users=factory.local_user_repository(),
            policy_engine=policy_engine,
            orchestrator=orchestrator,
        )

    async def handle_event(self, event: LocalEvent) -> LocalEventResult:
        if isinstance(event, UserRegisteredEvent):
            return await self._on_registered(event)
        if isinstance(event, UserLoginEvent):
            action = await self._policy.on_login(event.user_id)
            return LocalEventResult(event.event, event.user_id, action)
        if isinstance(event, UserRoleChangedEvent):
            return await self._on_role_changed(event)
        if isinstance(event, UserProfileUpdatedEvent):
            return await self._on_profile_updated(event)
        msg = f"Unhandled local event: {event!r}"
        raise TypeError(msg)

    async def _on_registered(self, event: UserRegisteredEvent) -> LocalEventResult:
        if await self._local_users.find_by_email(event.email) is not None:
            raise ConflictError(f"Email already registered: {event.email}")
        if await self._local_users.username_exists(event.username):
            raise ConflictError(f"Username already taken: {event.username}")

        try:
            roles = LocalRole.parse_many(event.roles) or {LocalRole.default()}
        except ValueError as e:
            raise ValidationError(f"Unknown role: {e}") from e

        user = LocalUser.create(
            email=event.email,
            username=event.username,
            display_name=event.display_name,
            roles=roles,
        )
        await self._local_users.save(user)
        logger.info("Registered local user %s", user.id)

        action = await self._policy.evaluate_user(user)
        return LocalEventResult(event.event, user.id, action or "registered")

    async def _on_role_changed(self, event: UserRoleChangedEvent) -> LocalEventResult:
        action = await self._policy.on_role_change(event.user_id, event.roles)
        if action is None:
            # Still mapped with new roles, mirror them
            await self._orchestrator.on_profile_updated(event.user_id, ["roles"])
        return LocalEventResult(event.event, event.user_id, action, ("roles",))

    async def _on_profile_updated(
        self,
        event: UserProfileUpdatedEvent,
    ) -> LocalEventResult:
        user = await self._get_user(event.user_id)
        changed = user.update_profile(event.fields)
        if not changed:
            return LocalEventResult(event.event, user.id)

        await self._local_users.save(user)
        result = await self._orchestrator.on_profile_updated(user.id, changed)
        return LocalEventResult(
            event.event,
            user.id,
            "synced" if result is not None else None,
            tuple(changed),
        )

    async def _get_user(self, local_user_id: UUID) -> LocalUser:
        user = await self._local_users.find_by_id(local_user_id)
        if user is None:
            raise LocalUserNotFoundError(local_user_id)
        return user
