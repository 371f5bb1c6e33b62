"""Identity domain: users on both sides and the mapping between them.

This domain handles:
- LocalUser aggregate (local store identity, roles, profile)
- ProviderUser entity (auth provider record, created lazily)
- IdentityMapping (append-only 1:1 link between the two)
- SyncState (cached session token, sync timestamps, source tag)
"""

from bridge.domain.identity.aggregates import LocalUser
from bridge.domain.identity.entities import IdentityMapping, ProviderUser, SyncState
from bridge.domain.identity.exceptions import (
    LocalUserNotFoundError,
    LockedRoleError,
    MappingAlreadyExistsError,
    MissingDataError,
    NotLinkedError,
    ProviderConnectionError,
    SyncFailedError,
)
from bridge.domain.identity.repositories import (
    IdentityMappingRepository,
    LocalUserRepository,
    ProviderUserRepository,
    SyncStateRepository,
)
from bridge.domain.identity.value_objects import (
    LocalRole,
    SyncSource,
    SyncStatus,
    UserSnapshot,
)

__all__ = [
    "IdentityMapping",
    "IdentityMappingRepository",
    "LocalRole",
    "LocalUser",
    "LocalUserNotFoundError",
    "LocalUserRepository",
    "LockedRoleError",
    "MappingAlreadyExistsError",
    "MissingDataError",
    "NotLinkedError",
    "ProviderConnectionError",
    "ProviderUser",
    "ProviderUserRepository",
    "SyncFailedError",
    "SyncSource",
    "SyncState",
    "SyncStateRepository",
    "SyncStatus",
    "UserSnapshot",
]
