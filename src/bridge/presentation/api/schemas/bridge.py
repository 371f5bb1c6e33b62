"""Schemas for the signed bridge endpoints."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RemoteUserRequest(BaseModel):
    """Provider user data pushed to the bridge.

    Either the provider id or the email may be missing from a malformed
    call; both are checked by the identity mapper so the error carries the
    ``MISSING_DATA`` code.
    """

    user_id: Optional[str] = Field(None, description="Auth provider user id")
    email: Optional[str] = Field(None, description="Email address of the user")
    name: Optional[str] = Field(None, description="Display name")
    roles: list[str] = Field(default_factory=list, description="Provider roles")
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "user_id": "42",
                    "email": "ada@example.com",
                    "name": "Ada Lovelace",
                    "roles": ["editor"],
                },
            ],
        },
    )


class RemoteUserResponse(BaseModel):
    success: bool = True
    user_id: UUID = Field(..., description="Local user id")
    provider_user_id: str
    created: bool = Field(..., description="A new local user was created")
    linked: bool = Field(..., description="A new mapping was created")


class LocalSessionRequest(BaseModel):
    user_id: UUID = Field(..., description="Local user id")


class LocalSessionResponse(BaseModel):
    """A new bridge session plus an access token for the local API."""

    success: bool = True
    user_id: UUID
    provider_user_id: str
    session_token: str
    expires_at: datetime
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class TokenExchangeResponse(BaseModel):
    success: bool = True
    user_id: UUID
    local_token: str
    provider_token: str
    expires_at: datetime


class CurrentUserResponse(BaseModel):
    """Local identity behind a provider bearer token."""

    user_id: UUID
    provider_user_id: str
    email: str
    username: str
    display_name: str
    roles: list[str]
    sync_status: str
    remote_verified: bool = Field(
        ...,
        description="False when the provider could not be reached",
    )
    session_refreshed: bool
