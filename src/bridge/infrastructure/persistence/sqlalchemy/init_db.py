"""Database initialization utilities."""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

# Import models to register them with both metadata objects
import bridge.infrastructure.persistence.sqlalchemy.models  # noqa: F401
from bridge.infrastructure.persistence.sqlalchemy.models.base import (
    LocalBase,
    ProviderBase,
)
from bridge_config.settings import get_settings

logger = logging.getLogger(__name__)


async def create_local_tables(engine: AsyncEngine) -> None:
    """Create missing tables in the local store (idempotent)."""
    async with engine.begin() as conn:
        await conn.run_sync(LocalBase.metadata.create_all)


async def create_provider_tables(engine: AsyncEngine) -> None:
    """Create missing tables in the auth provider store (idempotent)."""
    async with engine.begin() as conn:
        await conn.run_sync(ProviderBase.metadata.create_all)


async def _init_databases() -> None:
    settings = get_settings()

    local_engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    provider_engine = create_async_engine(
        settings.provider_database_url,
        pool_pre_ping=True,
    )

    logger.info("Ensuring local store tables exist...")
    await create_local_tables(local_engine)
    logger.info("Ensuring auth provider store tables exist...")
    await create_provider_tables(provider_engine)

    await local_engine.dispose()
    await provider_engine.dispose()
    logger.info("Database schema is up to date (missing tables created if needed)")


def db_init() -> None:
    """Create all tables in both stores."""
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_init_databases())
