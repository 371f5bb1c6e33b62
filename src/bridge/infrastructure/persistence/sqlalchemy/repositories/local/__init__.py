from bridge.infrastructure.persistence.sqlalchemy.repositories.local.auto_sync_policy_repository import (  # NOQA: E501
    AutoSyncPolicyRepositorySQLAlchemy,
)
from bridge.infrastructure.persistence.sqlalchemy.repositories.local.local_user_repository import (  # NOQA: E501
    LocalUserRepositorySQLAlchemy,
)
from bridge.infrastructure.persistence.sqlalchemy.repositories.local.sync_state_repository import (  # NOQA: E501
    SyncStateRepositorySQLAlchemy,
)

__all__ = [
    "AutoSyncPolicyRepositorySQLAlchemy",
    "LocalUserRepositorySQLAlchemy",
    "SyncStateRepositorySQLAlchemy",
]
