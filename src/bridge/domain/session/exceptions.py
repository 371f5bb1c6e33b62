"""Session domain exceptions."""

from bridge.domain.shared.exceptions import AuthenticationError, ErrorCode


class SessionInvalidError(AuthenticationError):
    """The presented token has no live session."""

    def __init__(self, message: str = "No live session for this token") -> None:
        super().__init__(message, code=ErrorCode.SESSION_INVALID)
