"""Events raised by the local application about its own users."""

from dataclasses import dataclass
from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from bridge.domain.shared.exceptions import ErrorCode, ValidationError


class _LocalEvent(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class UserRegisteredEvent(_LocalEvent):
    event: Literal["user.registered"]
    email: EmailStr
    username: str = Field(min_length=1, max_length=100)
    display_name: Optional[str] = None
    roles: list[str] = Field(default_factory=list)


class UserLoginEvent(_LocalEvent):
    event: Literal["user.login"]
    user_id: UUID


class UserRoleChangedEvent(_LocalEvent):
    event: Literal["user.role_changed"]
    user_id: UUID
    roles: list[str]


class UserProfileUpdatedEvent(_LocalEvent):
    event: Literal["user.profile_updated"]
    user_id: UUID
    fields: dict[str, Any] = Field(min_length=1)


LocalEvent = Annotated[
    Union[
        UserRegisteredEvent,
        UserLoginEvent,
        UserRoleChangedEvent,
        UserProfileUpdatedEvent,
    ],
    Field(discriminator="event"),
]

_local_event_adapter: TypeAdapter[LocalEvent] = TypeAdapter(LocalEvent)


def parse_local_event(payload: Any) -> LocalEvent:
    """Validate a raw local event body.

    Raises
    ------
    ValidationError
        MISSING_DATA without an event type, INVALID_EVENT otherwise
    """
    if not isinstance(payload, dict) or not payload.get("event"):
        raise ValidationError("Missing event type", code=ErrorCode.MISSING_DATA)
    try:
        return _local_event_adapter.validate_python(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            "Malformed local event",
            code=ErrorCode.INVALID_EVENT,
            details={"errors": e.errors(include_url=False)},
        ) from e


@dataclass(frozen=True)
class LocalEventResult:
    event: str
    local_user_id: UUID
    action: Optional[str] = None
    changed_fields: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "success": True,
            "event": self.event,
            "user_id": str(self.local_user_id),
            "action": self.action,
            "changed_fields": list(self.changed_fields),
        }
