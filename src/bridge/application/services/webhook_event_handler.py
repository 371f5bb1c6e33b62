"""Handle events pushed by the auth provider."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from bridge.application.dtos import (
    SessionCreatedEvent,
    SessionEndedEvent,
    UserDeletedEvent,
    UserUpdatedEvent,
    WebhookEvent,
    WebhookResult,
)
from bridge.application.events import DomainEventPublisher
from bridge.application.services.identity_mapper import IdentityMapper
from bridge.domain.identity import (
    IdentityMapping,
    IdentityMappingRepository,
    LocalUser,
    LocalUserNotFoundError,
    LocalUserRepository,
    SyncStateRepository,
)
from bridge.domain.identity.services import translate_fields, translate_roles
from bridge.domain.shared.events import (
    ProviderSessionCreated,
    ProviderSessionEnded,
    ProviderUserDeleted,
    ProviderUserUpdated,
)

if TYPE_CHECKING:
    from bridge.application.factories import RepositoryFactory

logger = logging.getLogger(__name__)


class WebhookEventHandler:
    """Apply provider events to the local store.

    The request signature is checked before an event reaches this class.
    Every event must refer to a mapped provider user.
    """

    def __init__(
        self,
        local_users: LocalUserRepository,
        sync_states: SyncStateRepository,
        mappings: IdentityMappingRepository,
        mapper: IdentityMapper,
        events: DomainEventPublisher,
    ):
        self._local_users = local_users
        self._sync_states = sync_states
        self._mappings = mappings
        self._mapper = mapper
        self._events = events
        self._handlers: dict[
            type, Callable[[object, IdentityMapping], Awaitable[WebhookResult]]
        ] = {
            SessionCreatedEvent: self._on_session_created,
            SessionEndedEvent: self._on_session_ended,
            UserDeletedEvent: self._on_user_deleted,
            UserUpdatedEvent: self._on_user_updated,
        }

    @classmethod
    def from_factory(
        cls,
        factory: RepositoryFactory,
        events: DomainEventPublisher,
    ) -> WebhookEventHandler:
        return cls(
            local_users=factory.local_user_repository(),
            sync_states=factory.sync_state_repository(),
            mappings=factory.mapping_repository(),
            mapper=IdentityMapper.from_factory(factory, events),
            events=events,
        )

    async def handle_event(self, event: WebhookEvent) -> WebhookResult:
        """Dispatch a validated provider event.

        Raises
        ------
        LocalUserNotFoundError
            If the event's user has no mapping
        """
        mapping = await self._mappings.find_by_provider_user_id(event.user_id)
        if mapping is None:
            logger.warning(
                "Webhook %s for unmapped provider user %s",
                event.event,
                event.user_id,
            )
            raise LocalUserNotFoundError(event.user_id)

        logger.info("Handling webhook %s for %s", event.event, mapping.local_user_id)
        handler = self._handlers[type(event)]
        return await handler(event, mapping)

    async def _on_session_created(
        self,
        event: SessionCreatedEvent,
        mapping: IdentityMapping,
    ) -> WebhookResult:
        action = "ignored"
        if event.session_token:
            state = await self._sync_states.get_or_create(mapping.local_user_id)
            state.cache_session(event.session_token)
            await self._sync_states.save(state)
            action = "session_cached"

        await self._events.publish(
            ProviderSessionCreated(
                local_user_id=mapping.local_user_id,
                provider_user_id=mapping.provider_user_id,
            ),
        )
        return WebhookResult(event.event, mapping.local_user_id, action)

    async def _on_session_ended(
        self,
        event: SessionEndedEvent,
        mapping: IdentityMapping,
    ) -> WebhookResult:
        state = await self._sync_states.find(mapping.local_user_id)
        if state is not None and state.session_token is not None:
            state.clear_session()
            await self._sync_states.save(state)

        await self._events.publish(
            ProviderSessionEnded(
                local_user_id=mapping.local_user_id,
                provider_user_id=mapping.provider_user_id,
            ),
        )
        return WebhookResult(event.event, mapping.local_user_id, "session_cleared")

    async def _on_user_deleted(
        self,
        event: UserDeletedEvent,
        mapping: IdentityMapping,
    ) -> WebhookResult:
        await self._mapper.unsync(mapping.local_user_id)
        await self._local_users.delete(mapping.local_user_id)

        await self._events.publish(
            ProviderUserDeleted(
                local_user_id=mapping.local_user_id,
                provider_user_id=mapping.provider_user_id,
            ),
        )
        logger.info(
            "Deleted local user %s after provider deletion",
            mapping.local_user_id,
        )
        return WebhookResult(event.event, mapping.local_user_id, "user_deleted")

    async def _on_user_updated(
        self,
        event: UserUpdatedEvent,
        mapping: IdentityMapping,
    ) -> WebhookResult:
        user = await self._get_user(mapping)

        changed: list[str] = []
        if event.roles is not None and user.assign_roles(translate_roles(event.roles)):
            changed.append("roles")
        changed.extend(user.update_profile(translate_fields(event.metadata)))
        if changed:
            await self._local_users.save(user)

        snapshot = dict(event.metadata)
        if event.roles is not None:
            snapshot["roles"] = list(event.roles)
        state = await self._sync_states.get_or_create(user.id)
        state.record_snapshot(snapshot)
        await self._sync_states.save(state)

        await self._events.publish(
            ProviderUserUpdated(
                local_user_id=user.id,
                provider_user_id=mapping.provider_user_id,
                roles=tuple(sorted(role.value for role in user.roles)),
                changed_fields=tuple(changed),
            ),
        )
        logger.info("Applied provider update to %s: %s", user.id, changed or "no changes")
        return WebhookResult(event.event, user.id, "user_updated")

    async def _get_user(self, mapping: IdentityMapping) -> LocalUser:
        user = await self._local_users.find_by_id(mapping.local_user_id)
        if user is None:
            raise LocalUserNotFoundError(mapping.local_user_id)
        return user
