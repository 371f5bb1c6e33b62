"""Repository factory protocol for the application layer."""

from __future__ import annotations

from typing import Any, Protocol

from bridge.application.ports.transaction import TransactionScope
from bridge.domain.identity.repositories import (
    IdentityMappingRepository,
    LocalUserRepository,
    ProviderUserRepository,
    SyncStateRepository,
)
from bridge.domain.policy import AutoSyncPolicyRepository
from bridge.domain.session import SessionRepository


class RepositoryFactory(Protocol):
    """Protocol for creating repositories over both stores."""

    @property
    def local_session(self) -> Any:
        """Local store session, committed by the presentation layer."""
        ...

    @property
    def provider_transaction(self) -> TransactionScope:
        """Scoped transaction over the auth provider store."""
        ...

    def local_user_repository(self) -> LocalUserRepository:
        ...

    def sync_state_repository(self) -> SyncStateRepository:
        ...

    def policy_repository(self) -> AutoSyncPolicyRepository:
        ...

    def provider_user_repository(self) -> ProviderUserRepository:
        ...

    def mapping_repository(self) -> IdentityMappingRepository:
        ...

    def session_repository(self) -> SessionRepository:
        ...
