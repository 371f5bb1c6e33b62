"""Cookie-based session endpoints for the local front end."""

import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Response

from bridge.presentation.api.dependencies import (
    LocalSession,
    SessionManager,
    SettingsDep,
)
from bridge.presentation.api.routers._cookies import (
    SESSION_COOKIE,
    clear_session_cookie,
)
from bridge.presentation.api.schemas import SessionCheckResponse, SessionEndResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions")


@router.get(
    "/check",
    summary="Check the session cookie",
    responses={200: {"description": "Login state of the caller"}},
)
async def check_session(
    manager: SessionManager,
    bridge_session: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> SessionCheckResponse:
    check = await manager.check_session(bridge_session)
    return SessionCheckResponse(
        logged_in=check.logged_in,
        session_token=check.session_token,
        user_id=check.user_id,
    )


@router.delete(
    "/current",
    summary="End the current session",
    responses={200: {"description": "Session ended; cookie cleared"}},
)
async def end_current_session(
    response: Response,
    manager: SessionManager,
    settings: SettingsDep,
    session: LocalSession,
    bridge_session: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> SessionEndResponse:
    """End the session behind the cookie. Always clears the cookie."""
    ended = False
    check = await manager.check_session(bridge_session)
    if check.logged_in and check.user_id is not None:
        ended = await manager.end_session(check.user_id)
        await session.commit()

    clear_session_cookie(response, settings)
    return SessionEndResponse(ended=ended)
