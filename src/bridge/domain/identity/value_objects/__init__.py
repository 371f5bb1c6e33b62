from bridge.domain.identity.value_objects.local_role import LocalRole
from bridge.domain.identity.value_objects.sync_source import SyncSource
from bridge.domain.identity.value_objects.sync_status import SyncStatus
from bridge.domain.identity.value_objects.user_snapshot import UserSnapshot

__all__ = ["LocalRole", "SyncSource", "SyncStatus", "UserSnapshot"]
