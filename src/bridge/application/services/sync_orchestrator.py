"""Profile synchronization from the local store to the auth provider."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional
from uuid import UUID

from bridge.application.dtos import (
    BulkSyncEntry,
    BulkSyncResult,
    ProviderUserData,
    SyncResult,
    SyncStatusInfo,
)
from bridge.application.events import DomainEventPublisher
from bridge.application.ports import ProviderApiPort, TransactionScope
from bridge.application.retry import RetryPolicy
from bridge.application.services.identity_mapper import IdentityMapper
from bridge.domain.identity import (
    IdentityMappingRepository,
    LocalUser,
    LocalUserNotFoundError,
    LocalUserRepository,
    ProviderUser,
    ProviderUserRepository,
    SyncFailedError,
    SyncSource,
    SyncStateRepository,
    UserSnapshot,
)
from bridge.domain.identity.services import allocate_username, username_base
from bridge.domain.shared.events import ProfileSynced, ProfileSyncFailed
from bridge.domain.shared.exceptions import DomainException, ExternalServiceError
from bridge.domain.shared.time import utc_now

if TYPE_CHECKING:
    from bridge.application.factories import RepositoryFactory

logger = logging.getLogger(__name__)

LAST_SYNCED_META_KEY = "last_synced_at"

# Local changes that are mirrored to the provider
RELEVANT_PROFILE_FIELDS = frozenset(
    {
        "display_name",
        "first_name",
        "last_name",
        "description",
        "locale",
        "nickname",
        "subscription_status",
        "subscription_plan",
        "roles",
    },
)


class SyncOrchestrator:
    """Push local profiles to the provider and reconcile in bulk."""

    def __init__(  # NOQA: PLR0913
        self,
        mapper: IdentityMapper,
        local_users: LocalUserRepository,
        sync_states: SyncStateRepository,
        provider_users: ProviderUserRepository,
        mappings: IdentityMappingRepository,
        provider_transaction: TransactionScope,
        events: DomainEventPublisher,
        provider_api: Optional[ProviderApiPort] = None,
        profile_retry: Optional[RetryPolicy] = None,
    ):
        self._mapper = mapper
        self._local_users = local_users
        self._sync_states = sync_states
        self._provider_users = provider_users
        self._mappings = mappings
        self._provider_tx = provider_transaction
        self._events = events
        self._provider_api = provider_api
        self._profile_retry = profile_retry or RetryPolicy.exponential(3, 1.0)

    @classmethod
    def from_factory(
        cls,
        factory: RepositoryFactory,
        events: DomainEventPublisher,
        provider_api: Optional[ProviderApiPort] = None,
        profile_retry: Optional[RetryPolicy] = None,
    ) -> SyncOrchestrator:
        return cls(
            mapper=IdentityMapper.from_factory(factory, events),
            local_users=factory.local_user_repository(),
            sync_states=factory.sync_state_repository(),
            provider_users=factory.provider_user_repository(),
            mappings=factory.mapping_repository(),
            provider_transaction=factory.provider_transaction,
            events=events,
            provider_api=provider_api,
            profile_retry=profile_retry,
        )

    async def push_profile_sync(
        self,
        local_user_id: UUID,
        snapshot: Optional[UserSnapshot] = None,
        source: SyncSource = SyncSource.MANUAL,
    ) -> SyncResult:
        """Write a local user's profile to their provider user.

        Creates the provider user and mapping first if needed. The provider
        write is atomic; on failure the local state is marked
        ``sync_failed`` and the typed error is raised. No retry happens
        here, callers that want one wrap this call in a RetryPolicy.

        Raises
        ------
        LocalUserNotFoundError
            If the local user does not exist
        ProviderConnectionError
            If the provider store is unreachable
        SyncFailedError
            For any other provider write failure
        """
        user = await self._get_user(local_user_id)
        snapshot = snapshot or UserSnapshot.from_local_user(user)

        try:
            link = await self._mapper.ensure_provider_user(user, source)
            synced_at = utc_now()

            async def _write() -> None:
                provider_user = await self._provider_users.find_by_id(
                    link.provider_user_id,
                )
                if provider_user is None:
                    username = await allocate_username(
                        username_base(snapshot.username),
                        self._provider_users.username_exists,
                    )
                    provider_user = ProviderUser(
                        email=snapshot.email,
                        username=username,
                        id=link.provider_user_id,
                    )
                provider_user.apply_snapshot(snapshot)
                await self._provider_users.save(provider_user)
                await self._provider_users.upsert_meta(
                    provider_user.id,
                    LAST_SYNCED_META_KEY,
                    synced_at.isoformat(),
                )

            await self._provider_tx.run(_write)
        except ExternalServiceError as e:
            await self._record_failure(user.id, e)
            raise
        except DomainException:
            raise
        except Exception as e:
            error = SyncFailedError(f"Profile sync failed: {e}")
            await self._record_failure(user.id, error)
            raise error from e

        state = await self._sync_states.get_or_create(user.id)
        state.mark_synced(synced_at)
        await self._sync_states.save(state)

        await self._events.publish(
            ProfileSynced(
                local_user_id=user.id,
                provider_user_id=link.provider_user_id,
            ),
        )
        logger.info("Synced profile of %s to %s", user.id, link.provider_user_id)
        return SyncResult(
            local_user_id=user.id,
            provider_user_id=link.provider_user_id,
            synced_at=synced_at,
            created_mapping=link.created,
        )

    async def bulk_sync_all(
        self,
        source: SyncSource = SyncSource.MANUAL,
    ) -> BulkSyncResult:
        """Ensure a provider user for every local user.

        Users are processed one at a time. Already-mapped users are
        skipped, so running this again is harmless.
        """
        users = await self._local_users.list_all()
        logger.info("Starting bulk sync of %d users", len(users))
        return await self.sync_users(users, source)

    async def sync_users(
        self,
        users: Iterable[LocalUser],
        source: SyncSource,
    ) -> BulkSyncResult:
        result = BulkSyncResult(started_at=utc_now())
        for user in users:
            try:
                link = await self._mapper.ensure_provider_user(user, source)
            except Exception as e:
                logger.warning("Bulk sync failed for %s: %s", user.id, e)
                result.add_failed(
                    BulkSyncEntry(str(user.id), email=user.email, error=str(e)),
                )
                continue

            entry = BulkSyncEntry(
                str(user.id),
                email=user.email,
                provider_user_id=link.provider_user_id,
            )
            if link.created:
                result.add_synced(entry)
            else:
                result.add_skipped(entry)

        logger.info(
            "Bulk sync done: %d synced, %d skipped, %d failed",
            len(result.synced),
            len(result.skipped),
            len(result.failed),
        )
        return result

    async def pull_provider_directory(self) -> BulkSyncResult:
        """Link or create a local user for every provider user.

        Raises
        ------
        ProviderConnectionError
            If the directory cannot be fetched
        """
        if self._provider_api is None:
            raise SyncFailedError("Auth provider API is not configured")

        directory = await self._provider_api.list_users()
        logger.info("Pulled %d users from auth provider", len(directory))

        result = BulkSyncResult(started_at=utc_now())
        for entry in directory:
            data = ProviderUserData(
                provider_user_id=entry.provider_user_id,
                email=entry.email,
                name=entry.name,
                roles=entry.roles,
                metadata=entry.metadata,
            )
            try:
                link = await self._mapper.link_or_create_local_user(data)
            except Exception as e:
                logger.warning(
                    "Pulling provider user %s failed: %s",
                    entry.provider_user_id,
                    e,
                )
                result.add_failed(
                    BulkSyncEntry(entry.provider_user_id, email=entry.email, error=str(e)),
                )
                continue

            bulk_entry = BulkSyncEntry(
                str(link.local_user_id),
                email=entry.email,
                provider_user_id=link.provider_user_id,
            )
            if link.linked:
                result.add_synced(bulk_entry)
            else:
                result.add_skipped(bulk_entry)
        return result

    async def on_profile_updated(
        self,
        local_user_id: UUID,
        changed_fields: Iterable[str],
    ) -> Optional[SyncResult]:
        """Resync a mapped user whose relevant profile fields changed.

        Returns None when nothing was pushed, including after the retry
        policy gave up; the failure is already recorded on the sync state.
        """
        relevant = RELEVANT_PROFILE_FIELDS.intersection(changed_fields)
        if not relevant:
            return None
        if await self._mappings.find_by_local_user_id(local_user_id) is None:
            logger.debug("Profile of unmapped user %s changed, not syncing", local_user_id)
            return None

        try:
            return await self._profile_retry.run(
                lambda: self.push_profile_sync(local_user_id),
                retry_on=(ExternalServiceError,),
            )
        except ExternalServiceError as e:
            logger.error(
                "Profile resync of %s failed after %d attempts: %s",
                local_user_id,
                self._profile_retry.max_attempts,
                e,
            )
            return None

    async def get_sync_status(self, local_user_id: UUID) -> SyncStatusInfo:
        user = await self._get_user(local_user_id)
        mapping = await self._mappings.find_by_local_user_id(user.id)
        state = await self._sync_states.find(user.id)

        return SyncStatusInfo(
            local_user_id=user.id,
            provider_user_id=mapping.provider_user_id if mapping else None,
            sync_status=state.sync_status.value if state and state.sync_status else None,
            sync_source=state.sync_source.value if state and state.sync_source else None,
            last_synced_at=state.last_synced_at if state else None,
            last_login_at=state.last_login_at if state else None,
            last_error=state.last_error if state else None,
        )

    async def _get_user(self, local_user_id: UUID) -> LocalUser:
        user = await self._local_users.find_by_id(local_user_id)
        if user is None:
            raise LocalUserNotFoundError(local_user_id)
        return user

    async def _record_failure(
        self,
        local_user_id: UUID,
        error: ExternalServiceError,
    ) -> None:
        logger.warning("Profile sync of %s failed: %s", local_user_id, error.message)
        state = await self._sync_states.get_or_create(local_user_id)
        state.mark_failed(error.message)
        await self._sync_states.save(state)
        await self._events.publish(
            ProfileSyncFailed(
                local_user_id=local_user_id,
                error_code=error.code.value,
                message=error.message,
            ),
        )
