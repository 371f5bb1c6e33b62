"""Identity domain exceptions."""

from uuid import UUID

from bridge.domain.shared.exceptions import (
    BusinessRuleViolation,
    ConflictError,
    EntityNotFoundError,
    ErrorCode,
    ExternalServiceError,
    ValidationError,
)


class MissingDataError(ValidationError):
    """Inbound provider data lacks a required field."""

    def __init__(self, field: str) -> None:
        super().__init__(
            f"Missing required field: {field}",
            code=ErrorCode.MISSING_DATA,
            details={"field": field},
        )


class LocalUserNotFoundError(EntityNotFoundError):
    def __init__(self, user_ref: UUID | str) -> None:
        super().__init__(
            f"User not found: {user_ref}",
            code=ErrorCode.USER_NOT_FOUND,
            details={"user": str(user_ref)},
        )


class NotLinkedError(ConflictError):
    """The local user has no identity mapping."""

    def __init__(self, local_user_id: UUID) -> None:
        super().__init__(
            f"User {local_user_id} is not linked to the auth provider",
            code=ErrorCode.NOT_LINKED,
            details={"local_user_id": str(local_user_id)},
        )


class MappingAlreadyExistsError(ConflictError):
    """A mapping insert hit a unique constraint."""

    def __init__(self, local_user_id: UUID, provider_user_id: str) -> None:
        super().__init__(
            "Identity mapping already exists",
            code=ErrorCode.ALREADY_LINKED,
            details={
                "local_user_id": str(local_user_id),
                "provider_user_id": provider_user_id,
            },
        )


class ProviderConnectionError(ExternalServiceError):
    """The auth provider (store or API) could not be reached."""

    def __init__(self, message: str = "Auth provider is unreachable") -> None:
        super().__init__(message, code=ErrorCode.CONNECTION_ERROR)


class SyncFailedError(ExternalServiceError):
    """A write to the auth provider failed after connecting."""

    def __init__(self, message: str = "Sync with auth provider failed") -> None:
        super().__init__(message, code=ErrorCode.SYNC_FAILED)


class LockedRoleError(BusinessRuleViolation):
    def __init__(self, roles: list[str]) -> None:
        super().__init__(
            f"Locked roles cannot be auto-synced: {', '.join(sorted(roles))}",
            code=ErrorCode.LOCKED_ROLE,
            details={"roles": sorted(roles)},
        )
