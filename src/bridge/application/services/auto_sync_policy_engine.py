"""Role-based automatic synchronization."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional
from uuid import UUID

from bridge.application.dtos import BulkSyncEntry, PolicyChangeResult, SyncStatusInfo
from bridge.application.events import DomainEventPublisher
from bridge.application.services.identity_mapper import IdentityMapper
from bridge.application.services.sync_orchestrator import SyncOrchestrator
from bridge.domain.identity import (
    IdentityMappingRepository,
    LocalRole,
    LocalUser,
    LocalUserNotFoundError,
    LocalUserRepository,
    LockedRoleError,
    SyncSource,
    SyncStateRepository,
)
from bridge.domain.policy import AutoSyncPolicy, AutoSyncPolicyRepository
from bridge.domain.shared.exceptions import ExternalServiceError, ValidationError

if TYPE_CHECKING:
    from bridge.application.factories import RepositoryFactory

logger = logging.getLogger(__name__)

DEFAULT_AUTO_SYNC_ROLES = frozenset({LocalRole.ADMINISTRATOR})


class AutoSyncPolicyEngine:
    """Decide which users are mirrored to the provider based on roles.

    A mapping created here is tagged ``policy``. Only such mappings are
    ever reversed by a policy change; users tagged ``locked`` are never
    touched.
    """

    def __init__(  # NOQA: PLR0913
        self,
        policy_repository: AutoSyncPolicyRepository,
        local_users: LocalUserRepository,
        sync_states: SyncStateRepository,
        mappings: IdentityMappingRepository,
        mapper: IdentityMapper,
        orchestrator: SyncOrchestrator,
        locked_roles: Iterable[LocalRole] = (),
        default_roles: Iterable[LocalRole] = DEFAULT_AUTO_SYNC_ROLES,
    ):
        self._policies = policy_repository
        self._local_users = local_users
        self._sync_states = sync_states
        self._mappings = mappings
        self._mapper = mapper
        self._orchestrator = orchestrator
        self._locked_roles = frozenset(locked_roles)
        self._default_roles = frozenset(default_roles)

    @classmethod
    def from_factory(  # NOQA: PLR0913
        cls,
        factory: RepositoryFactory,
        events: DomainEventPublisher,
        orchestrator: Optional[SyncOrchestrator] = None,
        locked_roles: Iterable[LocalRole] = (),
        default_roles: Iterable[LocalRole] = DEFAULT_AUTO_SYNC_ROLES,
    ) -> AutoSyncPolicyEngine:
        return cls(
            policy_repository=factory.policy_repository(),
            local_users=factory.local_user_repository(),
            sync_states=factory.sync_state_repository(),
            mappings=factory.mapping_repository(),
            mapper=IdentityMapper.from_factory(factory, events),
            orchestrator=orchestrator or SyncOrchestrator.from_factory(factory, events),
            locked_roles=locked_roles,
            default_roles=default_roles,
        )

    @property
    def locked_roles(self) -> frozenset[LocalRole]:
        return self._locked_roles

    async def get_policy(self) -> AutoSyncPolicy:
        stored = await self._policies.get_auto_sync_roles()
        roles = stored if stored is not None else self._default_roles
        policy, _ = AutoSyncPolicy.build(roles, self._locked_roles)
        return policy

    async def should_auto_sync(self, user: LocalUser) -> bool:
        policy = await self.get_policy()
        return policy.should_auto_sync(user.roles)

    async def evaluate_user(
        self,
        user: LocalUser,
        allow_unsync: bool = False,
    ) -> Optional[str]:
        """Bring one user in line with the current policy.

        Returns ``"synced"``, ``"unsynced"`` or None when nothing changed.
        Provider failures are logged, never raised, so the triggering
        local action is not affected.
        """
        state = await self._sync_states.find(user.id)
        if state is not None and state.is_locked:
            logger.debug("User %s is locked, skipping policy evaluation", user.id)
            return None

        policy = await self.get_policy()
        mapped = await self._mappings.find_by_local_user_id(user.id) is not None

        if policy.should_auto_sync(user.roles):
            if mapped:
                return None
            try:
                await self._orchestrator.push_profile_sync(user.id, source=SyncSource.POLICY)
            except ExternalServiceError as e:
                logger.warning("Auto-sync of %s failed: %s", user.id, e)
                return None
            logger.info("Auto-synced user %s", user.id)
            return "synced"

        if allow_unsync and mapped and state is not None:
            if state.sync_source is None or not state.sync_source.reversible_by_policy:
                return None
            try:
                await self._mapper.unsync(user.id)
            except ExternalServiceError as e:
                logger.warning("Auto-unsync of %s failed: %s", user.id, e)
                return None
            logger.info("Auto-unsynced user %s", user.id)
            return "unsynced"

        return None

    async def on_login(self, local_user_id: UUID) -> Optional[str]:
        user = await self._get_user(local_user_id)
        return await self.evaluate_user(user)

    async def on_role_change(
        self,
        local_user_id: UUID,
        roles: Optional[Iterable[str]] = None,
    ) -> Optional[str]:
        """Apply new roles, if given, then re-evaluate the user."""
        user = await self._get_user(local_user_id)
        if roles is not None:
            if user.assign_roles(_parse_roles(roles)):
                await self._local_users.save(user)
                logger.info("Roles of %s changed to %s", user.id, sorted(user.roles))
        return await self.evaluate_user(user, allow_unsync=True)

    async def update_policy(self, roles: Iterable[str]) -> PolicyChangeResult:
        """Persist a new auto-sync role set and apply it to existing users.

        Locked roles are dropped from the request and reported as rejected.

        Raises
        ------
        ValidationError
            If a role name is unknown
        LockedRoleError
            If roles were requested and all of them are locked
        """
        requested = _parse_roles(roles)
        new_policy, rejected = AutoSyncPolicy.build(requested, self._locked_roles)
        if requested and not new_policy.auto_sync_roles:
            raise LockedRoleError([role.value for role in rejected])

        old_policy = await self.get_policy()
        await self._policies.save_auto_sync_roles(new_policy.auto_sync_roles)
        logger.info(
            "Auto-sync roles changed from %s to %s",
            sorted(r.value for r in old_policy.auto_sync_roles),
            sorted(r.value for r in new_policy.auto_sync_roles),
        )

        result = await self.apply_policy_change(
            new_policy.auto_sync_roles,
            old_policy.auto_sync_roles,
        )
        result.rejected_roles = sorted(role.value for role in rejected)
        return result

    async def apply_policy_change(
        self,
        new_roles: Iterable[LocalRole],
        old_roles: Iterable[LocalRole],
    ) -> PolicyChangeResult:
        """Sync users gaining an auto-sync role and unsync those losing one.

        Only users whose mapping was created by policy are unsynced, and
        only when they hold none of the remaining auto-sync roles.
        """
        policy, _ = AutoSyncPolicy.build(new_roles, self._locked_roles)
        diff = policy.diff_from(old_roles)
        result = PolicyChangeResult(
            added_roles=sorted(role.value for role in diff.added),
            removed_roles=sorted(role.value for role in diff.removed),
        )
        if diff.is_empty:
            return result

        if diff.added:
            for user in await self._local_users.list_with_any_role(diff.added):
                state = await self._sync_states.find(user.id)
                if state is not None and state.is_locked:
                    continue
                if await self._mappings.find_by_local_user_id(user.id) is not None:
                    continue
                try:
                    await self._orchestrator.push_profile_sync(
                        user.id,
                        source=SyncSource.POLICY,
                    )
                except Exception as e:
                    logger.warning("Policy sync of %s failed: %s", user.id, e)
                    result.failed.append(_entry(user, str(e)))
                    continue
                result.synced.append(_entry(user))

        if diff.removed:
            for user in await self._local_users.list_with_any_role(diff.removed):
                if policy.should_auto_sync(user.roles):
                    continue
                state = await self._sync_states.find(user.id)
                if state is None or state.sync_source != SyncSource.POLICY:
                    continue
                if await self._mappings.find_by_local_user_id(user.id) is None:
                    continue
                try:
                    await self._mapper.unsync(user.id)
                except Exception as e:
                    logger.warning("Policy unsync of %s failed: %s", user.id, e)
                    result.failed.append(_entry(user, str(e)))
                    continue
                result.unsynced.append(_entry(user))

        logger.info(
            "Policy change applied: %d synced, %d unsynced, %d failed",
            len(result.synced),
            len(result.unsynced),
            len(result.failed),
        )
        return result

    async def lock_user(self, local_user_id: UUID) -> SyncStatusInfo:
        """Exclude a user from all policy decisions."""
        user = await self._get_user(local_user_id)
        state = await self._sync_states.get_or_create(user.id)
        state.tag_source(SyncSource.LOCKED)
        await self._sync_states.save(state)
        logger.info("Locked user %s against policy changes", user.id)
        return await self._orchestrator.get_sync_status(user.id)

    async def unlock_user(self, local_user_id: UUID) -> SyncStatusInfo:
        user = await self._get_user(local_user_id)
        state = await self._sync_states.find(user.id)
        if state is not None and state.is_locked:
            mapped = await self._mappings.find_by_local_user_id(user.id) is not None
            state.unlock(SyncSource.MANUAL if mapped else None)
            await self._sync_states.save(state)
            logger.info("Unlocked user %s", user.id)
        return await self._orchestrator.get_sync_status(user.id)

    async def _get_user(self, local_user_id: UUID) -> LocalUser:
        user = await self._local_users.find_by_id(local_user_id)
        if user is None:
            raise LocalUserNotFoundError(local_user_id)
        return user


def _parse_roles(roles: Iterable[str]) -> frozenset[LocalRole]:
    try:
        return LocalRole.parse_many(roles)
    except ValueError as e:
        raise ValidationError(f"Unknown role: {e}") from e


def _entry(user: LocalUser, error: Optional[str] = None) -> BulkSyncEntry:
    return BulkSyncEntry(str(user.id), email=user.email, error=error)
