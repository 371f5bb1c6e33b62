from bridge.domain.identity.repositories.identity_mapping_repository import (
    IdentityMappingRepository,
)
from bridge.domain.identity.repositories.local_user_repository import (
    LocalUserRepository,
)
from bridge.domain.identity.repositories.provider_user_repository import (
    ProviderUserRepository,
)
from bridge.domain.identity.repositories.sync_state_repository import (
    SyncStateRepository,
)

__all__ = [
    "IdentityMappingRepository",
    "LocalUserRepository",
    "ProviderUserRepository",
    "SyncStateRepository",
]
