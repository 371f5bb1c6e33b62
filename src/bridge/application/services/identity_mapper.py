"""Identity mapping between local and auth provider users."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from bridge.application.dtos import LocalLink, ProviderLink, ProviderUserData
from bridge.application.events import DomainEventPublisher
from bridge.application.ports import TransactionScope
from bridge.domain.identity import (
    IdentityMapping,
    IdentityMappingRepository,
    LocalRole,
    LocalUser,
    LocalUserRepository,
    MappingAlreadyExistsError,
    MissingDataError,
    NotLinkedError,
    ProviderUser,
    ProviderUserRepository,
    SyncFailedError,
    SyncSource,
    SyncStateRepository,
    UserSnapshot,
)
from bridge.domain.identity.services import (
    allocate_username,
    username_base,
    username_base_from_email,
)
from bridge.domain.session import SessionRepository
from bridge.domain.shared.events import IdentityLinked, IdentityUnlinked
from bridge.domain.shared.exceptions import ConflictError, DomainException, ErrorCode

if TYPE_CHECKING:
    from bridge.application.factories import RepositoryFactory

logger = logging.getLogger(__name__)


class IdentityMapper:
    """Maintain the 1:1 mapping between local and provider users.

    Provider-side writes (user record, mapping, sessions) always run inside
    one provider transaction. Local-side writes are flushed to the local
    session and committed by the caller.
    """

    def __init__(  # NOQA: PLR0913
        self,
        local_users: LocalUserRepository,
        sync_states: SyncStateRepository,
        provider_users: ProviderUserRepository,
        mappings: IdentityMappingRepository,
        sessions: SessionRepository,
        provider_transaction: TransactionScope,
        events: DomainEventPublisher,
    ):
        self._local_users = local_users
        self._sync_states = sync_states
        self._provider_users = provider_users
        self._mappings = mappings
        self._sessions = sessions
        self._provider_tx = provider_transaction
        self._events = events

    @classmethod
    def from_factory(
        cls,
        factory: RepositoryFactory,
        events: DomainEventPublisher,
    ) -> IdentityMapper:
        return cls(
            local_users=factory.local_user_repository(),
            sync_states=factory.sync_state_repository(),
            provider_users=factory.provider_user_repository(),
            mappings=factory.mapping_repository(),
            sessions=factory.session_repository(),
            provider_transaction=factory.provider_transaction,
            events=events,
        )

    async def ensure_provider_user(
        self,
        local_user: LocalUser,
        source: SyncSource = SyncSource.MANUAL,
    ) -> ProviderLink:
        """Return the provider user of ``local_user``, creating it if needed.

        Parameters
        ----------
        local_user
            The local user to mirror
        source
            Why the mapping is being created, recorded on first creation only

        Returns
        -------
        ProviderLink with ``created`` False when a mapping already existed

        Raises
        ------
        ProviderConnectionError
            If the provider store is unreachable
        SyncFailedError
            If the provider write fails; nothing is persisted in that case
        """
        existing = await self._mappings.find_by_local_user_id(local_user.id)
        if existing is not None:
            logger.debug(
                "User %s already mapped to %s",
                local_user.id,
                existing.provider_user_id,
            )
            return ProviderLink(local_user.id, existing.provider_user_id, created=False)

        snapshot = UserSnapshot.from_local_user(local_user)

        async def _create() -> str:
            username = await allocate_username(
                username_base(local_user.username),
                self._provider_users.username_exists,
            )
            provider_user = ProviderUser.from_snapshot(snapshot, username)
            await self._provider_users.save(provider_user)
            await self._mappings.add(
                IdentityMapping.create(local_user.id, provider_user.id),
            )
            return provider_user.id

        try:
            provider_user_id = await self._provider_tx.run(_create)
        except MappingAlreadyExistsError:
            # A concurrent first sync won the insert, reuse its mapping
            winner = await self._mappings.find_by_local_user_id(local_user.id)
            if winner is None:
                raise SyncFailedError(
                    f"Mapping conflict for user {local_user.id}",
                ) from None
            logger.info("Concurrent mapping detected for user %s", local_user.id)
            return ProviderLink(local_user.id, winner.provider_user_id, created=False)
        except DomainException:
            raise
        except Exception as e:
            logger.warning("Creating provider user for %s failed: %s", local_user.id, e)
            raise SyncFailedError(f"Could not create provider user: {e}") from e

        await self._tag_source(local_user.id, source)
        await self._events.publish(
            IdentityLinked(
                local_user_id=local_user.id,
                provider_user_id=provider_user_id,
                source=source.value,
            ),
        )
        logger.info(
            "Created provider user %s for local user %s (source: %s)",
            provider_user_id,
            local_user.id,
            source.value,
        )
        return ProviderLink(local_user.id, provider_user_id, created=True)

    async def link_or_create_local_user(self, data: ProviderUserData) -> LocalLink:
        """Resolve inbound provider data to a local user.

        Lookup order: existing mapping, then a local user with the same
        email (linked, never duplicated), then a newly created local user
        with the minimum-privilege role.

        Raises
        ------
        MissingDataError
            If email or provider user id is missing
        ConflictError
            If the email belongs to a user already linked elsewhere
        """
        if not data.email or not data.email.strip():
            raise MissingDataError("email")
        if not data.provider_user_id:
            raise MissingDataError("provider_user_id")

        provider_user_id = data.provider_user_id
        existing = await self._mappings.find_by_provider_user_id(provider_user_id)
        if existing is not None:
            return LocalLink(existing.local_user_id, provider_user_id)

        created = False
        user = await self._local_users.find_by_email(data.email)
        if user is None:
            username = await allocate_username(
                username_base_from_email(data.email),
                self._local_users.username_exists,
            )
            user = LocalUser.create(
                email=data.email,
                username=username,
                display_name=data.name,
                roles=[LocalRole.default()],
            )
            await self._local_users.save(user)
            created = True

        async def _link() -> None:
            await self._mappings.add(IdentityMapping.create(user.id, provider_user_id))

        try:
            await self._provider_tx.run(_link)
        except MappingAlreadyExistsError:
            winner = await self._mappings.find_by_provider_user_id(provider_user_id)
            if winner is not None:
                return LocalLink(winner.local_user_id, provider_user_id)
            raise ConflictError(
                f"User {user.email} is already linked to another provider account",
                code=ErrorCode.ALREADY_LINKED,
                details={"local_user_id": str(user.id)},
            ) from None

        await self._tag_source(user.id, SyncSource.PROVIDER)
        await self._events.publish(
            IdentityLinked(
                local_user_id=user.id,
                provider_user_id=provider_user_id,
                source=SyncSource.PROVIDER.value,
            ),
        )
        logger.info(
            "Linked provider user %s to %s local user %s",
            provider_user_id,
            "new" if created else "existing",
            user.id,
        )
        return LocalLink(user.id, provider_user_id, created=created, linked=True)

    async def unsync(self, local_user_id: UUID) -> bool:
        """Remove a user's mapping and all state derived from it.

        Raises
        ------
        NotLinkedError
            If the user has no mapping; nothing is changed
        """
        mapping = await self._mappings.find_by_local_user_id(local_user_id)
        if mapping is None:
            raise NotLinkedError(local_user_id)

        async def _remove() -> None:
            await self._sessions.delete_for_provider_user(mapping.provider_user_id)
            await self._mappings.delete(mapping)

        await self._provider_tx.run(_remove)
        await self._sync_states.delete(local_user_id)

        await self._events.publish(
            IdentityUnlinked(
                local_user_id=local_user_id,
                provider_user_id=mapping.provider_user_id,
            ),
        )
        logger.info(
            "Unsynced local user %s from provider user %s",
            local_user_id,
            mapping.provider_user_id,
        )
        return True

    async def find_mapping(self, local_user_id: UUID) -> IdentityMapping | None:
        return await self._mappings.find_by_local_user_id(local_user_id)

    async def _tag_source(self, local_user_id: UUID, source: SyncSource) -> None:
        state = await self._sync_states.get_or_create(local_user_id)
        state.tag_source(source)
        await self._sync_states.save(state)
