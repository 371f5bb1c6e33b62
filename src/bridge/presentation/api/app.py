"""HTTP surface of the identity bridge.

Bridge, webhook, local-event, session and admin routes live under
``/api/v1``; ``/health`` and ``/`` stay unversioned.

Run with ``uvicorn bridge.presentation.api.app:create_app --factory``.
"""

import logging
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bridge.infrastructure.persistence.sqlalchemy.init_db import (
    create_local_tables,
    create_provider_tables,
)
from bridge.presentation.api.dependencies import (
    get_engine,
    get_provider_client,
    get_provider_engine,
)
from bridge.presentation.api.exception_handlers import setup_exception_handlers
from bridge.presentation.api.routers import (
    admin_router,
    bridge_router,
    local_events_router,
    sessions_router,
    webhooks_router,
)
from bridge_config.settings import Settings, get_settings


@lru_cache(maxsize=1)
def _configure_logging() -> None:
    """Send bridge logs to stdout; third-party libraries stay at WARNING."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    logging.getLogger("bridge").setLevel(log_level)
    logging.getLogger("bridge_auth").setLevel(log_level)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
API_V1_PREFIX = "/api/v1"

OPENAPI_TAGS = [
    {
        "name": "Bridge",
        "description": """Signed endpoints for the auth provider and the local app.

**Signature:**
- `X-Timestamp`: unix seconds, at most 300 s old
- `X-Signature`: hex HMAC-SHA256 of the timestamp with the shared secret

**Operations:**
- Link or create a local user for a provider user
- Open a bridge session for a local user
- Exchange a local user id for local and provider tokens
""",
    },
    {
        "name": "Webhooks",
        "description": """Events pushed by the auth provider.

`session.created`, `session.ended`, `user.deleted` and `user.updated`.
Every event must refer to a mapped provider user.
""",
    },
    {
        "name": "Local Events",
        "description": """Events raised by the local application.

Registration, login, role and profile changes. The auto-sync policy
decides whether the user is synced to the auth provider.
""",
    },
    {
        "name": "Sessions",
        "description": "Cookie-based session check and logout.",
    },
    {
        "name": "Admin",
        "description": """Administrator operations (bearer token of an `administrator`).

- Per-user sync, unsync, status and lock
- Bulk sync and provider directory pull
- Auto-sync policy
- Active sessions report and expired session cleanup
""",
    },
    {
        "name": "Health",
        "description": "Service health monitoring endpoints.",
    },
    {
        "name": "Info",
        "description": "API information and discovery.",
    },
]


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncGenerator[None, None]:
    """Create missing tables, then close the provider client and engines on exit."""
    logger.info("Starting identity bridge API v%s...", API_VERSION)
    engine = get_engine()
    provider_engine = get_provider_engine()
    await _init_database_schema()
    yield

    logger.info("Shutting down identity bridge API...")
    await get_provider_client().close()
    await engine.dispose()
    await provider_engine.dispose()
    logger.info("Database connections closed")


async def _init_database_schema() -> None:
    logger.info("Ensuring local and provider tables exist...")
    try:
        await create_local_tables(get_engine())
        await create_provider_tables(get_provider_engine())
    except ConnectionRefusedError:
        logger.critical("Database refused the connection, cannot start")
        raise SystemExit(1) from None

    logger.info("Database schema ready")


def create_v1_router() -> APIRouter:
    v1_router = APIRouter()

    v1_router.include_router(bridge_router, tags=["Bridge"])
    v1_router.include_router(webhooks_router, tags=["Webhooks"])
    v1_router.include_router(local_events_router, tags=["Local Events"])
    v1_router.include_router(sessions_router, tags=["Sessions"])
    v1_router.include_router(admin_router, tags=["Admin"])

    return v1_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the bridge application.

    Parameters
    ----------
    settings
        Settings to use instead of the cached environment settings
    """
    _configure_logging()

    if settings is None:
        settings = get_settings()

    app_name = settings.app_name

    app = FastAPI(
        title=f"{app_name} API",
        description=(
            "Keeps a **local user store** and an **external auth provider** "
            "in agreement on who a user is and whether they are logged in."
        ),
        version=API_VERSION,
        docs_url="/docs" if settings.api_debug else None,
        redoc_url="/redoc" if settings.api_debug else None,
        openapi_url="/openapi.json" if settings.api_debug else None,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(create_v1_router(), prefix=API_V1_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict:
        return {
            "status": "healthy",
            "version": API_VERSION,
            "api_versions": ["v1"],
        }

    @app.get("/", tags=["Info"])
    async def root() -> dict:
        return {
            "name": f"{app_name} API",
            "version": API_VERSION,
            "docs": "/docs" if settings.api_debug else None,
            "api_base": API_V1_PREFIX,
            "endpoints": {
                "health": "/health",
                "bridge": f"{API_V1_PREFIX}/bridge",
                "webhooks": f"{API_V1_PREFIX}/webhooks/provider",
                "local_events": f"{API_V1_PREFIX}/local-events",
                "sessions": f"{API_V1_PREFIX}/sessions",
                "admin": f"{API_V1_PREFIX}/admin",
            },
        }

    return app
