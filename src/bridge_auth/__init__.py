"""Bridge Auth - request signing and token infrastructure.

This package has no knowledge of users or stores. It handles:
- Timestamp-windowed HMAC signatures shared with the auth provider
- Structural parsing of provider bearer tokens
- Access tokens for the bridge's own API (PyJWT)

Architecture:
    bridge_auth/
    ├── services/           # Pure logic (signatures, tokens)
    ├── schemas.py          # Data classes
    └── exceptions.py       # Auth exceptions
"""

from bridge_auth.exceptions import (
    AuthError,
    InvalidSignatureError,
    InvalidTokenError,
)
from bridge_auth.schemas import BearerTokenClaims, TokenPayload
from bridge_auth.services import BearerTokenParser, JWTService, SignatureValidator

__all__ = [
    # Services
    "BearerTokenParser",
    "JWTService",
    "SignatureValidator",
    # Schemas
    "BearerTokenClaims",
    "TokenPayload",
    # Exceptions
    "AuthError",
    "InvalidSignatureError",
    "InvalidTokenError",
]
