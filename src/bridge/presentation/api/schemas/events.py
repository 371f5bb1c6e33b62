from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class EventResultResponse(BaseModel):
    """Outcome of a handled provider or local event."""

    success: bool = True
    event: str
    user_id: UUID = Field(..., description="Local user id the event applied to")
    action: Optional[str] = None
    changed_fields: list[str] = Field(default_factory=list)
