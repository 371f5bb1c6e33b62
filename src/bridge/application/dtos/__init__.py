from bridge.application.dtos.identity import (
    LocalLink,
    ProviderLink,
    ProviderUserData,
    SyncStatusInfo,
)
from bridge.application.dtos.local_events import (
    LocalEvent,
    LocalEventResult,
    UserLoginEvent,
    UserProfileUpdatedEvent,
    UserRegisteredEvent,
    UserRoleChangedEvent,
    parse_local_event,
)
from bridge.application.dtos.policy import PolicyChangeResult
from bridge.application.dtos.session import (
    ActiveSessionEntry,
    SessionCheck,
    SessionInfo,
    TokenExchange,
    TokenValidationResult,
)
from bridge.application.dtos.sync import BulkSyncEntry, BulkSyncResult, SyncResult
from bridge.application.dtos.webhook_events import (
    SessionCreatedEvent,
    SessionEndedEvent,
    UserDeletedEvent,
    UserUpdatedEvent,
    WebhookEvent,
    WebhookResult,
    parse_webhook_event,
)

__all__ = [
    "ActiveSessionEntry",
    "BulkSyncEntry",
    "BulkSyncResult",
    "LocalEvent",
    "LocalEventResult",
    "LocalLink",
    "PolicyChangeResult",
    "ProviderLink",
    "ProviderUserData",
    "SessionCheck",
    "SessionCreatedEvent",
    "SessionEndedEvent",
    "SessionInfo",
    "SyncResult",
    "SyncStatusInfo",
    "TokenExchange",
    "TokenValidationResult",
    "UserDeletedEvent",
    "UserLoginEvent",
    "UserProfileUpdatedEvent",
    "UserRegisteredEvent",
    "UserRoleChangedEvent",
    "UserUpdatedEvent",
    "WebhookEvent",
    "WebhookResult",
    "parse_local_event",
    "parse_webhook_event",
]
