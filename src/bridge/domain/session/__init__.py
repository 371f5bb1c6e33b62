"""Session domain: login sessions and their lifecycle states."""

from bridge.domain.session.exceptions import SessionInvalidError
from bridge.domain.session.repository import SessionRepository
from bridge.domain.session.session import Session

__all__ = ["Session", "SessionInvalidError", "SessionRepository"]
