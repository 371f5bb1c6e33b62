"""SQLAlchemy implementation of ProviderUserRepository."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bridge.domain.identity import ProviderUser, ProviderUserRepository
from bridge.domain.shared.time import ensure_tz_aware
from bridge.infrastructure.persistence.sqlalchemy.models.provider import (
    ProviderUserMetaModel,
    ProviderUserModel,
)

logger = logging.getLogger(__name__)


class ProviderUserRepositorySQLAlchemy(ProviderUserRepository):
    """SQLAlchemy implementation of the ProviderUserRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, provider_user_id: str) -> Optional[ProviderUser]:
        model = await self._find_model_by_id(provider_user_id)
        if model is None:
            return None
        return self._map_to_domain(model)

    async def username_exists(self, username: str) -> bool:
        stmt = select(ProviderUserModel.id).where(
            ProviderUserModel.username == username,
        )
        result = await self._session.execute(stmt)
        return result.first() is not None

    async def save(self, user: ProviderUser) -> None:
        existing = await self._find_model_by_id(user.id)

        if existing:
            existing.email = user.email
            existing.username = user.username
            existing.name = user.name
            existing.user_metadata = user.metadata
            existing.updated_at = user.updated_at
            logger.debug("Updated provider user: %s", user.id)
        else:
            self._session.add(
                ProviderUserModel(
                    id=user.id,
                    email=user.email,
                    username=user.username,
                    name=user.name,
                    user_metadata=user.metadata,
                    created_at=user.created_at,
                    updated_at=user.updated_at,
                ),
            )
            logger.info("Created provider user: %s (%s)", user.id, user.username)

        await self._session.flush()

    async def upsert_meta(self, provider_user_id: str, key: str, value: str) -> None:
        model = await self._find_meta_model(provider_user_id, key)

        if model:
            model.meta_value = value
        else:
            self._session.add(
                ProviderUserMetaModel(
                    provider_user_id=provider_user_id,
                    meta_key=key,
                    meta_value=value,
                ),
            )

        await self._session.flush()

    async def get_meta(self, provider_user_id: str, key: str) -> Optional[str]:
        model = await self._find_meta_model(provider_user_id, key)
        return model.meta_value if model else None

    async def _find_model_by_id(
        self,
        provider_user_id: str,
    ) -> Optional[ProviderUserModel]:
        stmt = select(ProviderUserModel).where(ProviderUserModel.id == provider_user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _find_meta_model(
        self,
        provider_user_id: str,
        key: str,
    ) -> Optional[ProviderUserMetaModel]:
        stmt = select(ProviderUserMetaModel).where(
            ProviderUserMetaModel.provider_user_id == provider_user_id,
            ProviderUserMetaModel.meta_key == key,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _map_to_domain(self, model: ProviderUserModel) -> ProviderUser:
        return ProviderUser(
            id=model.id,
            email=model.email,
            username=model.username,
            name=model.name,
            metadata=model.user_metadata or {},
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )
