"""Session lifecycle across the local store and the auth provider.

Read paths favor availability: when the provider cannot be asked whether
a session is live, validation continues on local data only. Write paths
run inside the provider transaction.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Iterable, Optional
from uuid import UUID

from bridge_auth import BearerTokenParser, InvalidTokenError

from bridge.application.dtos import (
    ActiveSessionEntry,
    SessionCheck,
    SessionInfo,
    TokenExchange,
    TokenValidationResult,
)
from bridge.application.events import DomainEventPublisher
from bridge.application.ports import ProviderApiPort, TransactionScope
from bridge.application.retry import RetryPolicy
from bridge.application.services.sync_orchestrator import SyncOrchestrator
from bridge.domain.identity import (
    IdentityMapping,
    IdentityMappingRepository,
    LocalRole,
    LocalUser,
    LocalUserNotFoundError,
    LocalUserRepository,
    NotLinkedError,
    ProviderConnectionError,
    SyncStateRepository,
    SyncStatus,
)
from bridge.domain.session import Session, SessionInvalidError, SessionRepository
from bridge.domain.shared.events import (
    LocalSessionCreated,
    LocalSessionEnded,
    SessionRefreshed,
)
from bridge.domain.shared.exceptions import (
    AuthenticationError,
    ErrorCode,
    ExternalServiceError,
)
from bridge.domain.shared.time import utc_now

if TYPE_CHECKING:
    from bridge.application.factories import RepositoryFactory

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)


class SessionLifecycleManager:
    """Create, validate, exchange and end bridge sessions."""

    def __init__(  # NOQA: PLR0913
        self,
        local_users: LocalUserRepository,
        sync_states: SyncStateRepository,
        mappings: IdentityMappingRepository,
        sessions: SessionRepository,
        provider_transaction: TransactionScope,
        orchestrator: SyncOrchestrator,
        events: DomainEventPublisher,
        provider_api: Optional[ProviderApiPort] = None,
        token_parser: Optional[BearerTokenParser] = None,
        lookup_retry: Optional[RetryPolicy] = None,
        resync_retry: Optional[RetryPolicy] = None,
        session_ttl: timedelta = DEFAULT_SESSION_TTL,
    ):
        self._local_users = local_users
        self._sync_states = sync_states
        self._mappings = mappings
        self._sessions = sessions
        self._provider_tx = provider_transaction
        self._orchestrator = orchestrator
        self._events = events
        self._provider_api = provider_api
        self._parser = token_parser or BearerTokenParser()
        self._lookup_retry = lookup_retry or RetryPolicy.fixed(3, 0.5)
        self._resync_retry = resync_retry or RetryPolicy.fixed(3, 0.5)
        self._session_ttl = session_ttl

    @classmethod
    def from_factory(  # NOQA: PLR0913
        cls,
        factory: RepositoryFactory,
        events: DomainEventPublisher,
        provider_api: Optional[ProviderApiPort] = None,
        orchestrator: Optional[SyncOrchestrator] = None,
        lookup_retry: Optional[RetryPolicy] = None,
        resync_retry: Optional[RetryPolicy] = None,
        session_ttl: timedelta = DEFAULT_SESSION_TTL,
    ) -> SessionLifecycleManager:
        return cls(
            local_users=factory.local_user_repository(),
            sync_states=factory.sync_state_repository(),
            mappings=factory.mapping_repository(),
            sessions=factory.session_repository(),
            provider_transaction=factory.provider_transaction,
            orchestrator=orchestrator
            or SyncOrchestrator.from_factory(factory, events, provider_api=provider_api),
            events=events,
            provider_api=provider_api,
            lookup_retry=lookup_retry,
            resync_retry=resync_retry,
            session_ttl=session_ttl,
        )

    async def create_session(self, local_user_id: UUID) -> SessionInfo:
        """Open a new session for a mapped user.

        The previously cached session, if any, is revoked.

        Raises
        ------
        LocalUserNotFoundError
            If the local user does not exist
        NotLinkedError
            If the user has no provider mapping
        """
        user = await self.get_user(local_user_id)
        mapping = await self._require_mapping(user.id)
        state = await self._sync_states.get_or_create(user.id)
        previous_token = state.session_token

        async def _open() -> Session:
            if previous_token:
                previous = await self._sessions.find_by_token(previous_token)
                if previous is not None and not previous.revoked:
                    previous.revoke()
                    await self._sessions.save(previous)
            session = Session.start(mapping.provider_user_id, self._session_ttl)
            await self._sessions.save(session)
            return session

        session = await self._provider_tx.run(_open)

        state.cache_session(session.token, session.created_at)
        await self._sync_states.save(state)

        await self._events.publish(
            LocalSessionCreated(
                local_user_id=user.id,
                provider_user_id=mapping.provider_user_id,
                expires_at=session.expires_at,
            ),
        )
        logger.info("Created session for user %s", user.id)
        return SessionInfo(
            local_user_id=user.id,
            provider_user_id=mapping.provider_user_id,
            token=session.token,
            created_at=session.created_at,
            expires_at=session.expires_at,
        )

    async def validate_inbound_token(self, token: str) -> TokenValidationResult:
        """Resolve a provider bearer token to a local user.

        Parameters
        ----------
        token
            Provider token, with or without a ``Bearer`` prefix

        Returns
        -------
        TokenValidationResult; ``remote_verified`` is False when the
        provider could not be asked and validation fell back to local data

        Raises
        ------
        AuthenticationError
            INVALID_TOKEN for a malformed token
        LocalUserNotFoundError
            If no mapping exists for the token subject after retrying
        SessionInvalidError
            If the provider reports no live session for the token
        """
        try:
            claims = self._parser.parse(token)
        except InvalidTokenError as e:
            raise AuthenticationError(e.message, code=ErrorCode.INVALID_TOKEN) from e
        raw_token = _strip_bearer(token)
        subject = claims.subject

        mapping = await self._lookup_retry.poll(
            lambda: self._mappings.find_by_provider_user_id(subject),
        )
        if mapping is None:
            raise LocalUserNotFoundError(subject)
        user = await self.get_user(mapping.local_user_id)

        remote_verified = False
        if self._provider_api is not None:
            try:
                live = await self._provider_api.verify_session(subject, raw_token)
            except ExternalServiceError as e:
                logger.warning(
                    "Could not verify session of %s with auth provider, "
                    "continuing with local data: %s",
                    subject,
                    e,
                )
            else:
                if not live:
                    raise SessionInvalidError()
                remote_verified = True

        state = await self._sync_states.get_or_create(user.id)
        refreshed = False
        if not state.has_session_token(raw_token):
            state.cache_session(raw_token)
            await self._sync_states.save(state)
            refreshed = True
            logger.debug("Refreshed cached session of user %s", user.id)
            await self._events.publish(
                SessionRefreshed(
                    local_user_id=user.id,
                    provider_user_id=mapping.provider_user_id,
                    remote_verified=remote_verified,
                ),
            )

        try:
            await self._resync_retry.run(
                lambda: self._orchestrator.push_profile_sync(user.id),
                retry_on=(ExternalServiceError,),
            )
            sync_status = SyncStatus.SYNCED
        except ExternalServiceError as e:
            logger.warning("Resync of %s during validation failed: %s", user.id, e)
            sync_status = SyncStatus.SYNC_FAILED

        return TokenValidationResult(
            local_user_id=user.id,
            provider_user_id=mapping.provider_user_id,
            email=user.email,
            username=user.username,
            display_name=user.display_name,
            roles=tuple(sorted(role.value for role in user.roles)),
            sync_status=sync_status,
            remote_verified=remote_verified,
            session_refreshed=refreshed,
        )

    async def end_session(self, local_user_id: UUID) -> bool:
        """Clear the cached token and revoke its stored session.

        Returns False when the user had no session.
        """
        state = await self._sync_states.find(local_user_id)
        if state is None or state.session_token is None:
            logger.debug("No session to end for user %s", local_user_id)
            return False

        token = state.session_token

        async def _revoke() -> None:
            session = await self._sessions.find_by_token(token)
            if session is not None and not session.revoked:
                session.revoke()
                await self._sessions.save(session)

        await self._provider_tx.run(_revoke)

        state.clear_session()
        await self._sync_states.save(state)

        await self._events.publish(LocalSessionEnded(local_user_id=local_user_id))
        logger.info("Ended session for user %s", local_user_id)
        return True

    async def exchange_token(self, local_user_id: UUID) -> TokenExchange:
        """Open sessions on both sides and return both tokens.

        The provider session is requested first so an unreachable provider
        leaves no local session behind.

        Raises
        ------
        NotLinkedError
            If the user has no provider mapping
        ProviderConnectionError
            If the provider cannot be reached
        """
        if self._provider_api is None:
            raise ProviderConnectionError("Auth provider API is not configured")

        user = await self.get_user(local_user_id)
        mapping = await self._require_mapping(user.id)

        grant = await self._provider_api.create_session(mapping.provider_user_id)
        info = await self.create_session(user.id)

        logger.info("Exchanged tokens for user %s", user.id)
        return TokenExchange(
            local_user_id=user.id,
            local_token=info.token,
            provider_token=grant.token,
            expires_at=info.expires_at,
        )

    async def check_session(self, token: Optional[str]) -> SessionCheck:
        """Report whether a session token belongs to a logged-in user."""
        if not token:
            return SessionCheck.anonymous()

        state = await self._sync_states.find_by_session_token(token)
        if state is None:
            return SessionCheck.anonymous()

        # Tokens cached from provider webhooks have no stored session
        session = await self._sessions.find_by_token(token)
        if session is not None and not session.is_active():
            return SessionCheck.anonymous()

        return SessionCheck(
            logged_in=True,
            session_token=token,
            user_id=state.local_user_id,
        )

    async def cleanup_expired_sessions(self) -> int:
        now = utc_now()
        removed = await self._provider_tx.run(
            lambda: self._sessions.delete_expired(now),
        )
        logger.info("Removed %d expired sessions", removed)
        return removed

    async def list_active_sessions(
        self,
        roles: Iterable[LocalRole],
    ) -> list[ActiveSessionEntry]:
        """List users holding one of ``roles`` that have a cached session."""
        roles = frozenset(roles)
        entries = []
        for state in await self._sync_states.list_with_session():
            user = await self._local_users.find_by_id(state.local_user_id)
            if user is None or not user.has_any_role(roles):
                continue
            mapping = await self._mappings.find_by_local_user_id(user.id)
            entries.append(
                ActiveSessionEntry(
                    local_user_id=user.id,
                    email=user.email,
                    username=user.username,
                    display_name=user.display_name,
                    roles=tuple(sorted(role.value for role in user.roles)),
                    provider_user_id=mapping.provider_user_id if mapping else None,
                    last_login_at=state.last_login_at,
                ),
            )
        entries.sort(
            key=lambda e: e.last_login_at.timestamp() if e.last_login_at else 0.0,
            reverse=True,
        )
        return entries

    async def get_user(self, local_user_id: UUID) -> LocalUser:
        user = await self._local_users.find_by_id(local_user_id)
        if user is None:
            raise LocalUserNotFoundError(local_user_id)
        return user

    async def _require_mapping(self, local_user_id: UUID) -> IdentityMapping:
        mapping = await self._mappings.find_by_local_user_id(local_user_id)
        if mapping is None:
            raise NotLinkedError(local_user_id)
        return mapping


def _strip_bearer(token: str) -> str:
    token = token.strip()
    if token.lower().startswith("bearer "):
        return token[7:].strip()
    return token
