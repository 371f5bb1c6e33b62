from bridge.presentation.api.routers.admin import router as admin_router
from bridge.presentation.api.routers.bridge import router as bridge_router
from bridge.presentation.api.routers.local_events import router as local_events_router
from bridge.presentation.api.routers.sessions import router as sessions_router
from bridge.presentation.api.routers.webhooks import router as webhooks_router

__all__ = [
    "admin_router",
    "bridge_router",
    "local_events_router",
    "sessions_router",
    "webhooks_router",
]
