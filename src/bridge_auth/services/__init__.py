"""Authentication services."""

from bridge_auth.services.bearer_token import BearerTokenParser
from bridge_auth.services.jwt_service import JWTService
from bridge_auth.services.signature_validator import SignatureValidator

__all__ = [
    "BearerTokenParser",
    "JWTService",
    "SignatureValidator",
]
