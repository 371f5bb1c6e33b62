"""Authentication exceptions.

These exceptions are raised by the bridge_auth package and are translated
into HTTP responses by the presentation layer.
"""


class AuthError(Exception):
    """Base exception for all authentication errors."""

    def __init__(self, message: str = "Authentication error"):
        self.message = message
        super().__init__(self.message)


class InvalidSignatureError(AuthError):
    """Raised when a signed request fails timestamp or HMAC verification."""

    def __init__(self, message: str = "Invalid request signature"):
        super().__init__(message)


class InvalidTokenError(AuthError):
    """Raised when a token is invalid, expired, or malformed."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)
