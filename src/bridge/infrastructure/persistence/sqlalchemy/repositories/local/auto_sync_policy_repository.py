"""SQLAlchemy implementation of AutoSyncPolicyRepository."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bridge.domain.identity import LocalRole
from bridge.domain.policy import AutoSyncPolicyRepository
from bridge.domain.shared.time import utc_now
from bridge.infrastructure.persistence.sqlalchemy.models.local import (
    POLICY_ROW_ID,
    AutoSyncPolicyModel,
)

logger = logging.getLogger(__name__)


class AutoSyncPolicyRepositorySQLAlchemy(AutoSyncPolicyRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_auto_sync_roles(self) -> Optional[frozenset[LocalRole]]:
        model = await self._find_model()
        if model is None:
            return None
        return LocalRole.parse_many(model.auto_sync_roles)

    async def save_auto_sync_roles(self, roles: frozenset[LocalRole]) -> None:
        values = sorted(role.value for role in roles)
        model = await self._find_model()

        if model:
            model.auto_sync_roles = values
            model.updated_at = utc_now()
        else:
            self._session.add(
                AutoSyncPolicyModel(id=POLICY_ROW_ID, auto_sync_roles=values),
            )

        await self._session.flush()
        logger.info("Saved auto-sync roles: %s", values)

    async def _find_model(self) -> Optional[AutoSyncPolicyModel]:
        stmt = select(AutoSyncPolicyModel).where(
            AutoSyncPolicyModel.id == POLICY_ROW_ID,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()
