"""Structural parsing of auth provider bearer tokens."""

from datetime import datetime, timezone
from typing import Callable

import jwt

from bridge_auth.exceptions import InvalidTokenError
from bridge_auth.schemas import BearerTokenClaims

SUBJECT_CLAIMS = ("sub", "userId", "user_id", "id")


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class BearerTokenParser:
    """Decode a provider token without verifying its signature.

    The token must consist of three dot-separated segments (header, payload,
    signature) and carry a subject id in one of the known claims.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._clock = clock

    def parse(self, token: str | None) -> BearerTokenClaims:
        """Parse a bearer token.

        Parameters
        ----------
        token
            Raw token, with or without a ``Bearer`` prefix

        Returns
        -------
        BearerTokenClaims with the provider subject id

        Raises
        ------
        InvalidTokenError
            If the token is missing, malformed, expired or has no subject
        """
        if not token:
            raise InvalidTokenError("Missing bearer token")

        token = token.strip()
        if token.lower().startswith("bearer "):
            token = token[7:].strip()

        segments = token.split(".")
        if len(segments) != 3 or not all(segments[:2]):
            raise InvalidTokenError("Malformed token: expected three segments")

        try:
            header = jwt.get_unverified_header(token)
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Malformed token: {e}") from e

        subject = next(
            (str(claims[key]) for key in SUBJECT_CLAIMS if claims.get(key)),
            None,
        )
        if subject is None:
            raise InvalidTokenError("Token has no subject")

        expires_at = None
        if "exp" in claims:
            try:
                expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc)
            except (TypeError, ValueError, OverflowError, OSError) as e:
                raise InvalidTokenError("Malformed token expiry") from e
            if expires_at <= self._clock():
                raise InvalidTokenError("Token has expired")

        return BearerTokenClaims(
            subject=subject,
            header=header,
            claims=claims,
            expires_at=expires_at,
        )
