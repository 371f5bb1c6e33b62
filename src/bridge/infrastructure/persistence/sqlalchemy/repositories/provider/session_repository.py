"""SQLAlchemy implementation of SessionRepository."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from bridge.domain.session import Session, SessionRepository
from bridge.infrastructure.persistence.sqlalchemy.models.provider import SessionModel

logger = logging.getLogger(__name__)


class SessionRepositorySQLAlchemy(SessionRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_token(self, token: str) -> Optional[Session]:
        model = await self._find_model(token)
        if model is None:
            return None
        return Session(
            token=model.token,
            provider_user_id=model.provider_user_id,
            expires_at=model.expires_at,
            revoked=model.revoked,
            created_at=model.created_at,
        )

    async def save(self, session: Session) -> None:
        existing = await self._find_model(session.token)

        if existing:
            existing.expires_at = session.expires_at
            existing.revoked = session.revoked
        else:
            self._session.add(
                SessionModel(
                    token=session.token,
                    provider_user_id=session.provider_user_id,
                    expires_at=session.expires_at,
                    revoked=session.revoked,
                    created_at=session.created_at,
                ),
            )

        await self._session.flush()

    async def delete_for_provider_user(self, provider_user_id: str) -> int:
        stmt = delete(SessionModel).where(
            SessionModel.provider_user_id == provider_user_id,
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        logger.debug("Deleted %d sessions of %s", result.rowcount, provider_user_id)
        return result.rowcount or 0

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(SessionModel).where(SessionModel.expires_at <= now)
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount or 0

    async def _find_model(self, token: str) -> Optional[SessionModel]:
        stmt = select(SessionModel).where(SessionModel.token == token)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()
