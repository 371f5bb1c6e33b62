from bridge.domain.identity.entities.identity_mapping import IdentityMapping
from bridge.domain.identity.entities.provider_user import ProviderUser
from bridge.domain.identity.entities.sync_state import SyncState

__all__ = ["IdentityMapping", "ProviderUser", "SyncState"]
