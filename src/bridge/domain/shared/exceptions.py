"""Error codes and the exception hierarchy shared by every bridge layer."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Codes returned in the ``code`` field of API error bodies."""

    # Validation Errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_DATA = "MISSING_DATA"
    INVALID_EVENT = "INVALID_EVENT"

    # Authentication Errors (401)
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    INVALID_TOKEN = "INVALID_TOKEN"
    SESSION_INVALID = "SESSION_INVALID"

    # Not Found Errors (404)
    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Conflict Errors (409)
    CONFLICT = "CONFLICT"
    NOT_LINKED = "NOT_LINKED"
    ALREADY_LINKED = "ALREADY_LINKED"

    # Business Rule Violations (422)
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    LOCKED_ROLE = "LOCKED_ROLE"

    # Auth provider errors (502/503)
    CONNECTION_ERROR = "CONNECTION_ERROR"
    SYNC_FAILED = "SYNC_FAILED"

    # General Errors
    INTERNAL_ERROR = "INTERNAL_ERROR"

class DomainException(Exception):  # NOQA: N818
    """Base class for errors the bridge reports to its callers.

    Subclasses pick a ``default_code``; callers may override it per raise.

    Attributes
    ----------
    message
        Text returned to the API client
    code
        Machine readable code, mapped to an HTTP status by the API layer
    details
        Extra context for logs, never sent to the client
    """

    default_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, "
            f"code={self.code.value!r}, details={self.details!r})"
        )


class ValidationError(DomainException):
    """Malformed or incomplete input."""

    default_code = ErrorCode.VALIDATION_ERROR


class AuthenticationError(DomainException):
    default_code = ErrorCode.INVALID_TOKEN


class BusinessRuleViolation(DomainException):
    default_code = ErrorCode.BUSINESS_RULE_VIOLATION


class EntityNotFoundError(DomainException):
    default_code = ErrorCode.ENTITY_NOT_FOUND


class ConflictError(DomainException):
    """The write collides with a row that already exists."""

    default_code = ErrorCode.CONFLICT


class ExternalServiceError(DomainException):
    """The auth provider cannot be reached or rejected a write."""

    default_code = ErrorCode.SYNC_FAILED
