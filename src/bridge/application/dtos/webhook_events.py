"""Typed webhook events pushed by the auth provider.

Each event type is its own model; the ``event`` field discriminates.
Payloads are validated here, before anything is dispatched.
"""

from dataclasses import dataclass
from typing import Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from bridge.domain.shared.exceptions import ErrorCode, ValidationError


class _ProviderEvent(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    user_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("user_id", "userId"),
    )


class SessionCreatedEvent(_ProviderEvent):
    event: Literal["session.created"]
    session_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("session_token", "sessionToken"),
    )


class SessionEndedEvent(_ProviderEvent):
    event: Literal["session.ended"]


class UserDeletedEvent(_ProviderEvent):
    event: Literal["user.deleted"]


class UserUpdatedEvent(_ProviderEvent):
    event: Literal["user.updated"]
    roles: list[str] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


WebhookEvent = Annotated[
    Union[SessionCreatedEvent, SessionEndedEvent, UserDeletedEvent, UserUpdatedEvent],
    Field(discriminator="event"),
]

_webhook_event_adapter: TypeAdapter[WebhookEvent] = TypeAdapter(WebhookEvent)

SUPPORTED_EVENTS = ("session.created", "session.ended", "user.deleted", "user.updated")


def parse_webhook_event(payload: Any) -> WebhookEvent:
    """Validate a raw webhook body into its typed event.

    Raises
    ------
    ValidationError
        MISSING_DATA when ``event`` or ``user_id`` is absent,
        INVALID_EVENT for an unsupported event type or malformed fields
    """
    if not isinstance(payload, dict):
        raise ValidationError("Webhook body must be a JSON object")

    if not payload.get("event"):
        raise ValidationError("Missing event type", code=ErrorCode.MISSING_DATA)
    if not (payload.get("user_id") or payload.get("userId")):
        raise ValidationError("Missing user_id", code=ErrorCode.MISSING_DATA)

    if payload["event"] not in SUPPORTED_EVENTS:
        raise ValidationError(
            f"Unsupported webhook event: {payload['event']}",
            code=ErrorCode.INVALID_EVENT,
            details={"event": payload["event"]},
        )

    try:
        return _webhook_event_adapter.validate_python(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            "Malformed webhook payload",
            code=ErrorCode.INVALID_EVENT,
            details={"errors": e.errors(include_url=False)},
        ) from e


@dataclass(frozen=True)
class WebhookResult:
    event: str
    local_user_id: UUID
    action: str

    def to_dict(self) -> dict:
        return {
            "success": True,
            "event": self.event,
            "user_id": str(self.local_user_id),
            "action": self.action,
        }
