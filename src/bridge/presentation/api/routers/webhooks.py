"""Webhook receiver for auth provider events."""

import json
import logging

from fastapi import APIRouter, Depends, Request

from bridge.application.dtos import parse_webhook_event
from bridge.domain.shared.exceptions import ErrorCode, ValidationError
from bridge.presentation.api.dependencies import (
    LocalSession,
    WebhookHandler,
    require_signature,
)
from bridge.presentation.api.schemas import EventResultResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks")


async def read_json_body(request: Request) -> object:
    """Read the raw JSON body so malformed events keep our error codes."""
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(
            "Request body is not valid JSON",
            code=ErrorCode.MISSING_DATA,
        ) from e


@router.post(
    "/provider",
    summary="Receive an auth provider event",
    dependencies=[Depends(require_signature)],
    responses={
        200: {"description": "Event applied"},
        400: {"description": "Missing or unsupported event data"},
        401: {"description": "Invalid signature"},
        404: {"description": "Event refers to an unmapped user"},
    },
)
async def receive_provider_event(
    request: Request,
    handler: WebhookHandler,
    session: LocalSession,
) -> EventResultResponse:
    """
    Apply a ``session.created``, ``session.ended``, ``user.deleted`` or
    ``user.updated`` event.
    """
    event = parse_webhook_event(await read_json_body(request))
    result = await handler.handle_event(event)
    await session.commit()

    return EventResultResponse(
        event=result.event,
        user_id=result.local_user_id,
        action=result.action,
    )
