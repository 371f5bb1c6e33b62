"""Access tokens for the bridge's own API.

Issued when a local session is created and checked on admin endpoints.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from bridge_auth.exceptions import InvalidTokenError
from bridge_auth.schemas import TokenPayload


class JWTService:
    """Create and verify HS256 access tokens for local users.

    Examples
    --------
    >>> service = JWTService(secret_key="your-secret-key")
    >>> token = service.create_access_token(user_id, "user@example.com")
    >>> service.verify_token(token).user_id == user_id
    True
    """

    DEFAULT_ACCESS_EXPIRE_HOURS = 1
    ALGORITHM = "HS256"
    ISSUER = "identity-bridge"

    def __init__(
        self,
        secret_key: str,
        access_token_expire_hours: int = DEFAULT_ACCESS_EXPIRE_HOURS,
    ):
        if not secret_key:
            msg = "JWT secret key cannot be empty"
            raise ValueError(msg)

        self._secret_key = secret_key
        self._access_expire = timedelta(hours=access_token_expire_hours)

    @property
    def expires_in_seconds(self) -> int:
        return int(self._access_expire.total_seconds())

    def create_access_token(
        self,
        user_id: UUID,
        email: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        now = datetime.now(tz=timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "type": "access",
            "iss": self.ISSUER,
            "iat": now,
            "exp": now + (expires_delta or self._access_expire),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM)

    def verify_token(self, token: str) -> TokenPayload:
        """Verify and decode an access token.

        Raises
        ------
        InvalidTokenError
            If the token is invalid, expired, or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.ALGORITHM],
                issuer=self.ISSUER,
            )
            return TokenPayload(
                user_id=UUID(payload["sub"]),
                email=payload["email"],
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                token_type=payload.get("type", "access"),
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e
        except (KeyError, ValueError) as e:
            raise InvalidTokenError(f"Malformed token payload: {e}") from e
