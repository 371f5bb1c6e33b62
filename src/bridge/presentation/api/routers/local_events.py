"""Signed receiver for events raised by the local application."""

import logging

from fastapi import APIRouter, Depends, Request

from bridge.application.dtos import parse_local_event
from bridge.presentation.api.dependencies import (
    LocalEvents,
    LocalSession,
    require_signature,
)
from bridge.presentation.api.routers.webhooks import read_json_body
from bridge.presentation.api.schemas import EventResultResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/local-events",
    summary="Receive a local user event",
    dependencies=[Depends(require_signature)],
    responses={
        200: {"description": "Event applied"},
        400: {"description": "Missing or unsupported event data"},
        401: {"description": "Invalid signature"},
        404: {"description": "User not found"},
        409: {"description": "Email or username already registered"},
    },
)
async def receive_local_event(
    request: Request,
    handler: LocalEvents,
    session: LocalSession,
) -> EventResultResponse:
    """
    Apply ``user.registered``, ``user.login``, ``user.role_changed`` or
    ``user.profile_updated``.

    The auto-sync policy decides whether the user is synced or unsynced.
    """
    event = parse_local_event(await read_json_body(request))
    result = await handler.handle_event(event)
    await session.commit()

    return EventResultResponse(
        event=result.event,
        user_id=result.local_user_id,
        action=result.action,
        changed_fields=list(result.changed_fields),
    )
