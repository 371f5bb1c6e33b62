"""Session entity."""

import secrets
from datetime import datetime, timedelta

from bridge.domain.shared.time import ensure_tz_aware, utc_now

TOKEN_BYTES = 32  # 64 hex characters


class Session:
    """
    A login session owned by an auth provider user.

    A session is active while it is neither revoked nor past its expiry.
    """

    def __init__(
        self,
        token: str,
        provider_user_id: str,
        expires_at: datetime,
        revoked: bool = False,
        created_at: datetime | None = None,
    ):
        self._token = token
        self._provider_user_id = provider_user_id
        self._expires_at = ensure_tz_aware(expires_at)
        self._revoked = revoked
        self._created_at = ensure_tz_aware(created_at) or utc_now()

    @property
    def token(self) -> str:
        return self._token

    @property
    def provider_user_id(self) -> str:
        return self._provider_user_id

    @property
    def expires_at(self) -> datetime:
        return self._expires_at

    @property
    def revoked(self) -> bool:
        return self._revoked

    @property
    def created_at(self) -> datetime:
        return self._created_at

    def is_expired(self, now: datetime | None = None) -> bool:
        return self._expires_at <= (now or utc_now())

    def is_active(self, now: datetime | None = None) -> bool:
        return not self._revoked and not self.is_expired(now)

    def revoke(self) -> None:
        self._revoked = True

    @classmethod
    def start(cls, provider_user_id: str, ttl: timedelta) -> "Session":
        now = utc_now()
        return cls(
            token=secrets.token_hex(TOKEN_BYTES),
            provider_user_id=provider_user_id,
            expires_at=now + ttl,
            created_at=now,
        )

    def __repr__(self) -> str:
        return (
            f"Session(provider_user_id={self._provider_user_id}, "
            f"expires_at={self._expires_at.isoformat()}, revoked={self._revoked})"
        )
