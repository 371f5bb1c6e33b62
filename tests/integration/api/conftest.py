"""Fixtures for API tests.

The app runs against file-backed SQLite stores. Engines use NullPool so
connections are opened on the TestClient's own event loop.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import bridge.infrastructure.persistence.sqlalchemy.models  # noqa: F401
from bridge.application.ports import (
    ProviderApiPort,
    ProviderDirectoryUser,
    ProviderSessionGrant,
)
from bridge.infrastructure.persistence.sqlalchemy.models.base import (
    LocalBase,
    ProviderBase,
)
from bridge.presentation.api.app import create_app
from bridge.presentation.api.config import get_api_settings
from bridge.presentation.api.dependencies import (
    get_local_session,
    get_provider_api,
    get_provider_session,
)
from bridge_auth import JWTService, SignatureValidator
from bridge_config.settings import Settings


class FakeProviderApi(ProviderApiPort):
    """In-memory auth provider API."""

    def __init__(self):
        self.live_sessions = True
        self.directory: list[ProviderDirectoryUser] = []
        self.issued: list[str] = []

    async def verify_session(self, provider_user_id, token):
        return self.live_sessions

    async def create_session(self, provider_user_id):
        token = f"provider-token-{len(self.issued) + 1}"
        self.issued.append(token)
        return ProviderSessionGrant(
            token=token,
            expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
        )

    async def list_users(self):
        return list(self.directory)


def _create_tables(url: str, base) -> None:
    engine = create_engine(url)
    base.metadata.create_all(engine)
    engine.dispose()


@pytest.fixture
def settings():
    return Settings(api_cookie_secure=False, resync_attempts=1)


@pytest.fixture
def provider_api():
    return FakeProviderApi()


@pytest.fixture
def app(tmp_path, settings, provider_api):
    local_path = tmp_path / "local.db"
    provider_path = tmp_path / "provider.db"
    _create_tables(f"sqlite:///{local_path}", LocalBase)
    _create_tables(f"sqlite:///{provider_path}", ProviderBase)

    local_maker = async_sessionmaker(
        create_async_engine(f"sqlite+aiosqlite:///{local_path}", poolclass=NullPool),
        class_=AsyncSession,
        expire_on_commit=False,
    )
    provider_maker = async_sessionmaker(
        create_async_engine(f"sqlite+aiosqlite:///{provider_path}", poolclass=NullPool),
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def local_session():
        async with local_maker() as session:
            yield session

    async def provider_session():
        async with provider_maker() as session:
            yield session

    application = create_app(settings)
    application.dependency_overrides[get_api_settings] = lambda: settings
    application.dependency_overrides[get_local_session] = local_session
    application.dependency_overrides[get_provider_session] = provider_session
    application.dependency_overrides[get_provider_api] = lambda: provider_api
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def signed(settings):
    """Return fresh signature headers for each call."""
    validator = SignatureValidator(settings.bridge_shared_secret.get_secret_value())
    return validator.sign_headers


@pytest.fixture
def bearer_for(settings):
    jwt_service = JWTService(settings.jwt_secret_key.get_secret_value())

    def _bearer(user_id, email):
        token = jwt_service.create_access_token(user_id, email)
        return {"Authorization": f"Bearer {token}"}

    return _bearer
