"""Auto-sync policy domain."""

from bridge.domain.policy.auto_sync_policy import AutoSyncPolicy, PolicyDiff
from bridge.domain.policy.repository import AutoSyncPolicyRepository

__all__ = ["AutoSyncPolicy", "AutoSyncPolicyRepository", "PolicyDiff"]
