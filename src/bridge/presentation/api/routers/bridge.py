"""Signed endpoints called by the auth provider and the local application."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import HTTPAuthorizationCredentials

from bridge.application.dtos import ProviderUserData
from bridge.domain.shared.exceptions import AuthenticationError, ErrorCode
from bridge.domain.shared.time import utc_now
from bridge.presentation.api.dependencies import (
    JWTServiceDep,
    LocalSession,
    Mapper,
    SessionManager,
    SettingsDep,
    require_signature,
    security,
)
from bridge.presentation.api.routers._cookies import set_session_cookie
from bridge.presentation.api.schemas import (
    CurrentUserResponse,
    LocalSessionRequest,
    LocalSessionResponse,
    RemoteUserRequest,
    RemoteUserResponse,
    TokenExchangeResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bridge")


@router.post(
    "/remote-users",
    summary="Link or create a local user for a provider user",
    dependencies=[Depends(require_signature)],
    responses={
        200: {"description": "User linked (or already linked)"},
        400: {"description": "Missing provider id or email"},
        401: {"description": "Invalid signature"},
        409: {"description": "Local user already linked to another provider user"},
    },
)
async def create_remote_user(
    request: RemoteUserRequest,
    mapper: Mapper,
    session: LocalSession,
) -> RemoteUserResponse:
    """Resolve a provider user to a local user, creating one if needed."""
    link = await mapper.link_or_create_local_user(
        ProviderUserData(
            provider_user_id=request.user_id,
            email=request.email,
            name=request.name,
            roles=tuple(request.roles),
            metadata=request.metadata,
        ),
    )
    await session.commit()

    return RemoteUserResponse(
        user_id=link.local_user_id,
        provider_user_id=link.provider_user_id,
        created=link.created,
        linked=link.linked,
    )


@router.post(
    "/local-sessions",
    status_code=status.HTTP_201_CREATED,
    summary="Open a bridge session for a local user",
    dependencies=[Depends(require_signature)],
    responses={
        201: {"description": "Session created"},
        401: {"description": "Invalid signature"},
        404: {"description": "User not found"},
        409: {"description": "User is not linked to the auth provider"},
    },
)
async def create_local_session(
    request: LocalSessionRequest,
    response: Response,
    manager: SessionManager,
    jwt_service: JWTServiceDep,
    settings: SettingsDep,
    session: LocalSession,
) -> LocalSessionResponse:
    """
    Create a session for a mapped user.

    The session token is set as an HttpOnly cookie and returned in the body
    together with an access token for the local API.
    """
    info = await manager.create_session(request.user_id)
    user = await manager.get_user(info.local_user_id)
    await session.commit()

    access_token = jwt_service.create_access_token(user.id, user.email)
    max_age = max(int((info.expires_at - utc_now()).total_seconds()), 0)
    set_session_cookie(response, info.token, settings, max_age)

    return LocalSessionResponse(
        user_id=info.local_user_id,
        provider_user_id=info.provider_user_id,
        session_token=info.token,
        expires_at=info.expires_at,
        access_token=access_token,
        expires_in=jwt_service.expires_in_seconds,
    )


@router.post(
    "/exchange-token",
    summary="Exchange a local user id for local and provider tokens",
    dependencies=[Depends(require_signature)],
    responses={
        200: {"description": "Tokens issued"},
        401: {"description": "Invalid signature"},
        409: {"description": "User is not linked to the auth provider"},
        503: {"description": "Auth provider unreachable"},
    },
)
async def exchange_token(
    request: LocalSessionRequest,
    manager: SessionManager,
    session: LocalSession,
) -> TokenExchangeResponse:
    exchange = await manager.exchange_token(request.user_id)
    await session.commit()

    return TokenExchangeResponse(
        user_id=exchange.local_user_id,
        local_token=exchange.local_token,
        provider_token=exchange.provider_token,
        expires_at=exchange.expires_at,
    )


@router.get(
    "/me",
    summary="Resolve a provider bearer token to the local user",
    responses={
        200: {"description": "Token is valid"},
        401: {"description": "Missing, malformed or revoked token"},
        404: {"description": "No local user mapped to the token subject"},
    },
)
async def get_current_identity(
    manager: SessionManager,
    session: LocalSession,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUserResponse:
    if credentials is None:
        raise AuthenticationError(
            "Authentication required",
            code=ErrorCode.INVALID_TOKEN,
        )

    result = await manager.validate_inbound_token(credentials.credentials)
    # Persists the refreshed session cache and any resync bookkeeping
    await session.commit()

    return CurrentUserResponse(
        user_id=result.local_user_id,
        provider_user_id=result.provider_user_id,
        email=result.email,
        username=result.username,
        display_name=result.display_name,
        roles=list(result.roles),
        sync_status=result.sync_status.value,
        remote_verified=result.remote_verified,
        session_refreshed=result.session_refreshed,
    )
