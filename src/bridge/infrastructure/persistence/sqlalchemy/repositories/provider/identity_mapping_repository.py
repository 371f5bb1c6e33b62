"""SQLAlchemy implementation of IdentityMappingRepository."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bridge.domain.identity import (
    IdentityMapping,
    IdentityMappingRepository,
    MappingAlreadyExistsError,
)
from bridge.domain.shared.time import ensure_tz_aware
from bridge.infrastructure.persistence.sqlalchemy.models.provider import (
    IdentityMappingModel,
)

logger = logging.getLogger(__name__)


class IdentityMappingRepositorySQLAlchemy(IdentityMappingRepository):
    """SQLAlchemy implementation of IdentityMappingRepository.

    Uniqueness of both sides is enforced by the database. A violated
    constraint surfaces as MappingAlreadyExistsError; the session must
    then be rolled back by the surrounding transaction scope.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_local_user_id(
        self,
        local_user_id: UUID,
    ) -> Optional[IdentityMapping]:
        stmt = select(IdentityMappingModel).where(
            IdentityMappingModel.local_user_id == local_user_id,
        )
        return await self._find_one(stmt)

    async def find_by_provider_user_id(
        self,
        provider_user_id: str,
    ) -> Optional[IdentityMapping]:
        stmt = select(IdentityMappingModel).where(
            IdentityMappingModel.provider_user_id == provider_user_id,
        )
        return await self._find_one(stmt)

    async def add(self, mapping: IdentityMapping) -> None:
        self._session.add(
            IdentityMappingModel(
                id=mapping.id,
                local_user_id=mapping.local_user_id,
                provider_user_id=mapping.provider_user_id,
                created_at=mapping.created_at,
            ),
        )
        try:
            await self._session.flush()
        except IntegrityError as e:
            logger.info(
                "Mapping insert conflict for %s / %s",
                mapping.local_user_id,
                mapping.provider_user_id,
            )
            raise MappingAlreadyExistsError(
                mapping.local_user_id,
                mapping.provider_user_id,
            ) from e

        logger.info(
            "Created identity mapping: %s -> %s",
            mapping.local_user_id,
            mapping.provider_user_id,
        )

    async def delete(self, mapping: IdentityMapping) -> None:
        stmt = select(IdentityMappingModel).where(IdentityMappingModel.id == mapping.id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model:
            await self._session.delete(model)
            await self._session.flush()
            logger.info("Deleted identity mapping: %s", mapping.local_user_id)

    async def _find_one(self, stmt) -> Optional[IdentityMapping]:
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return IdentityMapping(
            id=model.id,
            local_user_id=model.local_user_id,
            provider_user_id=model.provider_user_id,
            created_at=ensure_tz_aware(model.created_at),
        )
