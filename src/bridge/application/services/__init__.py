from bridge.application.services.auto_sync_policy_engine import AutoSyncPolicyEngine
from bridge.application.services.identity_mapper import IdentityMapper
from bridge.application.services.local_event_handler import LocalEventHandler
from bridge.application.services.session_lifecycle_manager import (
    SessionLifecycleManager,
)
from bridge.application.services.sync_orchestrator import SyncOrchestrator
from bridge.application.services.webhook_event_handler import WebhookEventHandler

__all__ = [
    "AutoSyncPolicyEngine",
    "IdentityMapper",
    "LocalEventHandler",
    "SessionLifecycleManager",
    "SyncOrchestrator",
    "WebhookEventHandler",
]
