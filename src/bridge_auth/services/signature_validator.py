"""Shared-secret request signatures.

Requests between the bridge and the auth provider carry two headers:
a unix timestamp and the hex HMAC-SHA256 of that timestamp keyed with the
shared secret. A request is accepted only inside a fixed window around
the current time.
"""

import hashlib
import hmac
import logging
import time
from typing import Callable

from bridge_auth.exceptions import InvalidSignatureError

logger = logging.getLogger(__name__)

TIMESTAMP_HEADER = "X-Timestamp"
SIGNATURE_HEADER = "X-Signature"


class SignatureValidator:
    """Sign and verify timestamp-windowed HMAC signatures.

    Examples
    --------
    >>> validator = SignatureValidator(shared_secret="s3cret")
    >>> headers = validator.sign_headers()
    >>> validator.validate(headers["X-Timestamp"], headers["X-Signature"])
    True
    """

    DEFAULT_WINDOW_SECONDS = 300

    def __init__(
        self,
        shared_secret: str | None,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the validator.

        Parameters
        ----------
        shared_secret
            Secret shared with the auth provider. An empty or missing secret
            makes every validation fail.
        window_seconds
            Maximum allowed distance between the request timestamp and now
        clock
            Returns the current unix time, injectable for tests
        """
        self._secret = shared_secret or ""
        self._window = window_seconds
        self._clock = clock

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def compute_signature(self, timestamp: str) -> str:
        """Return the hex HMAC-SHA256 of ``timestamp`` keyed with the secret."""
        return hmac.new(
            self._secret.encode(),
            timestamp.encode(),
            hashlib.sha256,
        ).hexdigest()

    def validate(self, timestamp: str | None, signature: str | None) -> bool:
        """Check a timestamp/signature pair.

        Returns
        -------
        True only when both values are present, the secret is configured,
        the timestamp lies within the window and the signature matches.
        """
        if not timestamp or not signature:
            return False

        if not self._secret:
            logger.error("Signature check attempted without a shared secret")
            return False

        try:
            sent_at = int(timestamp)
        except ValueError:
            return False

        if abs(self._clock() - sent_at) > self._window:
            logger.debug("Signature timestamp outside window: %s", timestamp)
            return False

        if not signature.isascii():
            return False

        expected = self.compute_signature(timestamp)
        return hmac.compare_digest(expected, signature)

    def require_valid(self, timestamp: str | None, signature: str | None) -> None:
        """Validate and raise instead of returning False.

        Raises
        ------
        InvalidSignatureError
            If the pair does not validate
        """
        if not self.validate(timestamp, signature):
            raise InvalidSignatureError()

    def sign_headers(self) -> dict[str, str]:
        """Build signature headers for an outbound request."""
        timestamp = str(int(self._clock()))
        return {
            TIMESTAMP_HEADER: timestamp,
            SIGNATURE_HEADER: self.compute_signature(timestamp),
        }
