"""Data classes for decoded tokens."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class TokenPayload:
    """Decoded payload of a local API access token."""

    user_id: UUID
    email: str
    exp: datetime
    token_type: str = "access"

    def is_access_token(self) -> bool:
        return self.token_type == "access"


@dataclass(frozen=True)
class BearerTokenClaims:
    """Claims read from an auth provider bearer token.

    The provider signs its tokens with its own key, so only the structure
    is checked here. Liveness is verified against the provider's session
    records.
    """

    subject: str
    header: dict[str, Any]
    claims: dict[str, Any] = field(default_factory=dict)
    expires_at: datetime | None = None
