from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class SessionCheckResponse(BaseModel):
    logged_in: bool
    session_token: Optional[str] = None
    user_id: Optional[UUID] = None


class SessionEndResponse(BaseModel):
    success: bool = True
    ended: bool
