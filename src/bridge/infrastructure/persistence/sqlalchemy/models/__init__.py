"""SQLAlchemy models.

Importing this package registers every table on its base's metadata.
"""

from bridge.infrastructure.persistence.sqlalchemy.models.base import (
    LocalBase,
    ProviderBase,
    TimestampMixin,
)
from bridge.infrastructure.persistence.sqlalchemy.models.local import (
    POLICY_ROW_ID,
    AutoSyncPolicyModel,
    LocalUserModel,
    SyncStateModel,
)
from bridge.infrastructure.persistence.sqlalchemy.models.provider import (
    IdentityMappingModel,
    ProviderUserMetaModel,
    ProviderUserModel,
    SessionModel,
)

__all__ = [
    "POLICY_ROW_ID",
    "AutoSyncPolicyModel",
    "IdentityMappingModel",
    "LocalBase",
    "LocalUserModel",
    "ProviderBase",
    "ProviderUserMetaModel",
    "ProviderUserModel",
    "SessionModel",
    "SyncStateModel",
    "TimestampMixin",
]
