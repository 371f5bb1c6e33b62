"""FastAPI dependency injection for the bridge API.

Provides dependencies for:
- Database sessions for the local and auth provider stores
- Request signature and admin token checks
- The outbound auth provider client
- Service instances
"""

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from bridge.application.events import DomainEventPublisher
from bridge.application.ports import ProviderApiPort
from bridge.application.retry import RetryPolicy
from bridge.application.services import (
    AutoSyncPolicyEngine,
    IdentityMapper,
    LocalEventHandler,
    SessionLifecycleManager,
    SyncOrchestrator,
    WebhookEventHandler,
)
from bridge.domain.identity import LocalRole, LocalUser
from bridge.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyRepositoryFactory,
)
from bridge.infrastructure.provider import ProviderApiClient
from bridge.presentation.api.config import get_api_settings
from bridge_auth import InvalidTokenError, JWTService, SignatureValidator
from bridge_auth.services.signature_validator import SIGNATURE_HEADER, TIMESTAMP_HEADER
from bridge_config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Security scheme for bearer tokens (admin JWTs and provider tokens)
security = HTTPBearer(auto_error=False)

SettingsDep = Annotated[Settings, Depends(get_api_settings)]


# -----------------------------------------------------------------------------
# Database Engines & Sessions (Singletons)
# -----------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Shared async engine of the local store."""
    return create_async_engine(
        get_settings().database_url,
        echo=False,
        pool_pre_ping=True,  # Verify connections before use
    )


@lru_cache(maxsize=1)
def get_provider_engine() -> AsyncEngine:
    """Shared async engine of the auth provider store."""
    return create_async_engine(
        get_settings().provider_database_url,
        echo=False,
        pool_pre_ping=True,
    )


@lru_cache(maxsize=1)
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


@lru_cache(maxsize=1)
def get_provider_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        get_provider_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_local_session() -> AsyncGenerator[AsyncSession, None]:
    """Local store session dependency. Routers commit it themselves."""
    async with get_session_maker()() as session:
        yield session


async def get_provider_session() -> AsyncGenerator[AsyncSession, None]:
    """Auth provider store session dependency.

    Writes go through the repository factory's transaction scope.
    """
    async with get_provider_session_maker()() as session:
        yield session


LocalSession = Annotated[AsyncSession, Depends(get_local_session)]
ProviderSession = Annotated[AsyncSession, Depends(get_provider_session)]


async def get_repository_factory(
    local_session: LocalSession,
    provider_session: ProviderSession,
) -> SQLAlchemyRepositoryFactory:
    return SQLAlchemyRepositoryFactory(local_session, provider_session)


RepoFactory = Annotated[SQLAlchemyRepositoryFactory, Depends(get_repository_factory)]


@lru_cache(maxsize=1)
def get_event_publisher() -> DomainEventPublisher:
    """Process-wide domain event publisher."""
    return DomainEventPublisher()


EventPublisher = Annotated[DomainEventPublisher, Depends(get_event_publisher)]


# -----------------------------------------------------------------------------
# Request Signatures & Tokens
# -----------------------------------------------------------------------------


def get_signature_validator(settings: SettingsDep) -> SignatureValidator:
    return SignatureValidator(
        shared_secret=settings.bridge_shared_secret.get_secret_value(),
        window_seconds=settings.signature_window_seconds,
    )


async def require_signature(
    request: Request,
    validator: Annotated[SignatureValidator, Depends(get_signature_validator)],
) -> None:
    """Reject requests without a valid ``X-Timestamp``/``X-Signature`` pair."""
    validator.require_valid(
        request.headers.get(TIMESTAMP_HEADER),
        request.headers.get(SIGNATURE_HEADER),
    )


def get_jwt_service(settings: SettingsDep) -> JWTService:
    """Get JWT service for the bridge's own access tokens."""
    return JWTService(
        secret_key=settings.jwt_secret_key.get_secret_value(),
        access_token_expire_hours=settings.jwt_access_token_expire_hours,
    )


JWTServiceDep = Annotated[JWTService, Depends(get_jwt_service)]


async def get_current_user(
    factory: RepoFactory,
    jwt_service: JWTServiceDep,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> LocalUser:
    """
    Load the local user behind a bridge access token.

    Raises
    ------
    HTTPException
        401 if the token is missing, invalid, or the user no longer exists
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = jwt_service.verify_token(credentials.credentials)
    except InvalidTokenError as e:
        logger.warning("Invalid token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    if not payload.is_access_token():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await factory.local_user_repository().find_by_id(payload.user_id)
    if user is None:
        logger.warning("User not found for token: %s", payload.user_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


async def require_admin(user: LocalUser = Depends(get_current_user)) -> LocalUser:
    """Require a user holding the administrator role."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


AdminUser = Annotated[LocalUser, Depends(require_admin)]


# -----------------------------------------------------------------------------
# Auth Provider Client (Singleton)
# -----------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_provider_client() -> ProviderApiClient:
    settings = get_settings()
    return ProviderApiClient(
        base_url=settings.provider_api_url,
        signer=SignatureValidator(
            shared_secret=settings.provider_signing_secret,
            window_seconds=settings.signature_window_seconds,
        ),
        timeout=settings.provider_api_timeout,
    )


def get_provider_api() -> ProviderApiPort:
    return get_provider_client()


ProviderApi = Annotated[ProviderApiPort, Depends(get_provider_api)]


# -----------------------------------------------------------------------------
# Application Services
# -----------------------------------------------------------------------------
# Services have from_factory() classmethods that encapsulate their
# dependency knowledge; these builders only add configuration.


def get_identity_mapper(factory: RepoFactory, events: EventPublisher) -> IdentityMapper:
    return IdentityMapper.from_factory(factory, events)


def get_sync_orchestrator(
    factory: RepoFactory,
    events: EventPublisher,
    provider_api: ProviderApi,
    settings: SettingsDep,
) -> SyncOrchestrator:
    return SyncOrchestrator.from_factory(
        factory,
        events,
        provider_api=provider_api,
        profile_retry=RetryPolicy.exponential(
            settings.resync_attempts,
            settings.resync_base_delay_seconds,
        ),
    )


Orchestrator = Annotated[SyncOrchestrator, Depends(get_sync_orchestrator)]


def get_session_manager(
    factory: RepoFactory,
    events: EventPublisher,
    provider_api: ProviderApi,
    orchestrator: Orchestrator,
    settings: SettingsDep,
) -> SessionLifecycleManager:
    return SessionLifecycleManager.from_factory(
        factory,
        events,
        provider_api=provider_api,
        orchestrator=orchestrator,
        lookup_retry=RetryPolicy.fixed(
            settings.token_lookup_attempts,
            settings.token_lookup_delay_seconds,
        ),
        resync_retry=RetryPolicy.exponential(
            settings.resync_attempts,
            settings.resync_base_delay_seconds,
        ),
        session_ttl=timedelta(hours=settings.session_ttl_hours),
    )


def get_policy_engine(
    factory: RepoFactory,
    events: EventPublisher,
    orchestrator: Orchestrator,
    settings: SettingsDep,
) -> AutoSyncPolicyEngine:
    return AutoSyncPolicyEngine.from_factory(
        factory,
        events,
        orchestrator=orchestrator,
        locked_roles=LocalRole.parse_many(settings.locked_role_set),
        default_roles=LocalRole.parse_many(settings.default_auto_sync_role_set),
    )


PolicyEngine = Annotated[AutoSyncPolicyEngine, Depends(get_policy_engine)]


def get_webhook_handler(
    factory: RepoFactory,
    events: EventPublisher,
) -> WebhookEventHandler:
    return WebhookEventHandler.from_factory(factory, events)


def get_local_event_handler(
    factory: RepoFactory,
    policy_engine: PolicyEngine,
    orchestrator: Orchestrator,
) -> LocalEventHandler:
    return LocalEventHandler.from_factory(factory, policy_engine, orchestrator)


Mapper = Annotated[IdentityMapper, Depends(get_identity_mapper)]
SessionManager = Annotated[SessionLifecycleManager, Depends(get_session_manager)]
WebhookHandler = Annotated[WebhookEventHandler, Depends(get_webhook_handler)]
LocalEvents = Annotated[LocalEventHandler, Depends(get_local_event_handler)]
