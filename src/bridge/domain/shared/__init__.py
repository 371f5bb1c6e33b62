"""Shared domain building blocks."""

from bridge.domain.shared.exceptions import (
    AuthenticationError,
    BusinessRuleViolation,
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ExternalServiceError,
    ValidationError,
)
from bridge.domain.shared.time import ensure_tz_aware, utc_now

__all__ = [
    "AuthenticationError",
    "BusinessRuleViolation",
    "ConflictError",
    "DomainException",
    "EntityNotFoundError",
    "ErrorCode",
    "ExternalServiceError",
    "ValidationError",
    "ensure_tz_aware",
    "utc_now",
]
