from bridge.infrastructure.persistence.sqlalchemy.models.local.auto_sync_policy_model import (  # NOQA: E501
    POLICY_ROW_ID,
    AutoSyncPolicyModel,
)
from bridge.infrastructure.persistence.sqlalchemy.models.local.local_user_model import (
    LocalUserModel,
)
from bridge.infrastructure.persistence.sqlalchemy.models.local.sync_state_model import (
    SyncStateModel,
)

__all__ = ["POLICY_ROW_ID", "AutoSyncPolicyModel", "LocalUserModel", "SyncStateModel"]
