"""SQLAlchemy implementation of SyncStateRepository."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bridge.domain.identity import SyncState, SyncStateRepository
from bridge.domain.shared.time import ensure_tz_aware
from bridge.infrastructure.persistence.sqlalchemy.models.local import SyncStateModel

logger = logging.getLogger(__name__)


class SyncStateRepositorySQLAlchemy(SyncStateRepository):
    """SQLAlchemy implementation of the SyncStateRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find(self, local_user_id: UUID) -> Optional[SyncState]:
        model = await self._find_model(local_user_id)
        if model is None:
            return None
        return self._map_to_domain(model)

    async def find_by_session_token(self, token: str) -> Optional[SyncState]:
        stmt = select(SyncStateModel).where(SyncStateModel.session_token == token)
        result = await self._session.execute(stmt)
        model = result.scalars().first()

        if model is None:
            return None

        return self._map_to_domain(model)

    async def save(self, state: SyncState) -> None:
        existing = await self._find_model(state.local_user_id)

        if existing:
            self._update_model(existing, state)
        else:
            model = SyncStateModel(local_user_id=state.local_user_id)
            self._update_model(model, state)
            self._session.add(model)
            logger.debug("Created sync state: %s", state.local_user_id)

        await self._session.flush()

    async def delete(self, local_user_id: UUID) -> None:
        model = await self._find_model(local_user_id)

        if model:
            await self._session.delete(model)
            await self._session.flush()
            logger.debug("Deleted sync state: %s", local_user_id)

    async def list_with_session(self) -> list[SyncState]:
        stmt = select(SyncStateModel).where(SyncStateModel.session_token.is_not(None))
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def _find_model(self, local_user_id: UUID) -> Optional[SyncStateModel]:
        stmt = select(SyncStateModel).where(
            SyncStateModel.local_user_id == local_user_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _map_to_domain(self, model: SyncStateModel) -> SyncState:
        return SyncState(
            local_user_id=model.local_user_id,
            session_token=model.session_token,
            last_login_at=ensure_tz_aware(model.last_login_at),
            last_synced_at=ensure_tz_aware(model.last_synced_at),
            sync_status=model.sync_status,
            sync_source=model.sync_source,
            metadata_snapshot=model.metadata_snapshot,
            last_error=model.last_error,
            updated_at=ensure_tz_aware(model.updated_at),
        )

    def _update_model(self, model: SyncStateModel, state: SyncState) -> None:
        model.session_token = state.session_token
        model.last_login_at = state.last_login_at
        model.last_synced_at = state.last_synced_at
        model.sync_status = state.sync_status.value if state.sync_status else None
        model.sync_source = state.sync_source.value if state.sync_source else None
        model.metadata_snapshot = state.metadata_snapshot
        model.last_error = state.last_error
        model.updated_at = state.updated_at
