"""SQLAlchemy repository factory over the local and provider stores."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from bridge.infrastructure.persistence.sqlalchemy.repositories.local import (
    AutoSyncPolicyRepositorySQLAlchemy,
    LocalUserRepositorySQLAlchemy,
    SyncStateRepositorySQLAlchemy,
)
from bridge.infrastructure.persistence.sqlalchemy.repositories.provider import (
    IdentityMappingRepositorySQLAlchemy,
    ProviderUserRepositorySQLAlchemy,
    SessionRepositorySQLAlchemy,
)
from bridge.infrastructure.persistence.sqlalchemy.transaction import (
    SQLAlchemyTransactionScope,
)

logger = logging.getLogger(__name__)


class SQLAlchemyRepositoryFactory:
    """SQLAlchemy implementation of the RepositoryFactory Protocol.

    Local repositories only flush, the caller commits ``local_session``.
    Provider repositories are written through ``provider_transaction``.
    """

    def __init__(self, local_session: AsyncSession, provider_session: AsyncSession):
        self._local_session = local_session
        self._provider_session = provider_session
        self._provider_transaction = SQLAlchemyTransactionScope(provider_session)

        # Cached instances (created on demand)
        self._local_user_repo: LocalUserRepositorySQLAlchemy | None = None
        self._sync_state_repo: SyncStateRepositorySQLAlchemy | None = None
        self._policy_repo: AutoSyncPolicyRepositorySQLAlchemy | None = None
        self._provider_user_repo: ProviderUserRepositorySQLAlchemy | None = None
        self._mapping_repo: IdentityMappingRepositorySQLAlchemy | None = None
        self._session_repo: SessionRepositorySQLAlchemy | None = None

    @property
    def local_session(self) -> AsyncSession:
        return self._local_session

    @property
    def provider_session(self) -> AsyncSession:
        return self._provider_session

    @property
    def provider_transaction(self) -> SQLAlchemyTransactionScope:
        return self._provider_transaction

    def local_user_repository(self) -> LocalUserRepositorySQLAlchemy:
        if self._local_user_repo is None:
            self._local_user_repo = LocalUserRepositorySQLAlchemy(self._local_session)
        return self._local_user_repo

    def sync_state_repository(self) -> SyncStateRepositorySQLAlchemy:
        if self._sync_state_repo is None:
            self._sync_state_repo = SyncStateRepositorySQLAlchemy(self._local_session)
        return self._sync_state_repo

    def policy_repository(self) -> AutoSyncPolicyRepositorySQLAlchemy:
        if self._policy_repo is None:
            self._policy_repo = AutoSyncPolicyRepositorySQLAlchemy(self._local_session)
        return self._policy_repo

    def provider_user_repository(self) -> ProviderUserRepositorySQLAlchemy:
        if self._provider_user_repo is None:
            self._provider_user_repo = ProviderUserRepositorySQLAlchemy(
                self._provider_session,
            )
        return self._provider_user_repo

    def mapping_repository(self) -> IdentityMappingRepositorySQLAlchemy:
        if self._mapping_repo is None:
            self._mapping_repo = IdentityMappingRepositorySQLAlchemy(
                self._provider_session,
            )
        return self._mapping_repo

    def session_repository(self) -> SessionRepositorySQLAlchemy:
        if self._session_repo is None:
            self._session_repo = SessionRepositorySQLAlchemy(self._provider_session)
        return self._session_repo
