"""Fixtures for integration tests.

Both stores run on in-memory SQLite via aiosqlite, one engine per store,
so the split between local and provider transactions is exercised the
same way it is against PostgreSQL.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import bridge.infrastructure.persistence.sqlalchemy.models  # noqa: F401
from bridge.application.events import DomainEventPublisher
from bridge.infrastructure.persistence.sqlalchemy.models.base import (
    LocalBase,
    ProviderBase,
)
from bridge.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyRepositoryFactory,
)


def _memory_engine():
    return create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest.fixture
async def local_engine():
    engine = _memory_engine()
    async with engine.begin() as conn:
        await conn.run_sync(LocalBase.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def provider_engine():
    engine = _memory_engine()
    async with engine.begin() as conn:
        await conn.run_sync(ProviderBase.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def local_session(local_engine):
    maker = async_sessionmaker(local_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest.fixture
async def provider_session(provider_engine):
    maker = async_sessionmaker(
        provider_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with maker() as session:
        yield session


@pytest.fixture
def repo_factory(local_session, provider_session):
    return SQLAlchemyRepositoryFactory(local_session, provider_session)


@pytest.fixture
def event_publisher():
    return DomainEventPublisher()
