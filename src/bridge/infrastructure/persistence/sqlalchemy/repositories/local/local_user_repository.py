"""SQLAlchemy implementation of LocalUserRepository."""

import logging
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bridge.domain.identity import LocalRole, LocalUser, LocalUserRepository
from bridge.domain.shared.exceptions import ConflictError
from bridge.domain.shared.time import ensure_tz_aware
from bridge.infrastructure.persistence.sqlalchemy.models.local import LocalUserModel

logger = logging.getLogger(__name__)


class LocalUserRepositorySQLAlchemy(LocalUserRepository):
    """SQLAlchemy implementation of the LocalUserRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, user_id: UUID) -> Optional[LocalUser]:
        model = await self._find_model_by_id(user_id)
        if model is None:
            return None
        return self._map_to_domain(model)

    async def find_by_email(self, email: str) -> Optional[LocalUser]:
        stmt = select(LocalUserModel).where(
            LocalUserModel.email == email.strip().lower(),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._map_to_domain(model)

    async def username_exists(self, username: str) -> bool:
        stmt = select(LocalUserModel.id).where(LocalUserModel.username == username)
        result = await self._session.execute(stmt)
        return result.first() is not None

    async def save(self, user: LocalUser) -> None:
        existing = await self._find_model_by_id(user.id)

        try:
            if existing:
                self._update_model(existing, user)
                logger.debug("Updated local user: %s", user.id)
            else:
                self._session.add(self._map_to_model(user))
                logger.info("Created local user: %s (email: %s)", user.id, user.email)

            await self._session.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"Email or username already in use: {user.email}",
            ) from e

    async def delete(self, user_id: UUID) -> None:
        model = await self._find_model_by_id(user_id)

        if model:
            await self._session.delete(model)
            await self._session.flush()
            logger.info("Deleted local user: %s", user_id)

    async def list_all(self) -> list[LocalUser]:
        stmt = select(LocalUserModel).order_by(LocalUserModel.created_at)
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def list_with_any_role(self, roles: Iterable[LocalRole]) -> list[LocalUser]:
        # Roles are a JSON column, filtering happens in Python
        wanted = frozenset(roles)
        return [user for user in await self.list_all() if user.has_any_role(wanted)]

    async def _find_model_by_id(self, user_id: UUID) -> Optional[LocalUserModel]:
        stmt = select(LocalUserModel).where(LocalUserModel.id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _map_to_domain(self, model: LocalUserModel) -> LocalUser:
        return LocalUser.reconstitute(
            id=model.id,
            email=model.email,
            username=model.username,
            display_name=model.display_name,
            roles=model.roles or [],
            first_name=model.first_name,
            last_name=model.last_name,
            description=model.description,
            locale=model.locale,
            nickname=model.nickname,
            profile=model.profile or {},
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )

    def _map_to_model(self, user: LocalUser) -> LocalUserModel:
        return LocalUserModel(
            id=user.id,
            email=user.email,
            username=user.username,
            display_name=user.display_name,
            roles=sorted(role.value for role in user.roles),
            first_name=user.first_name,
            last_name=user.last_name,
            description=user.description,
            locale=user.locale,
            nickname=user.nickname,
            profile=user.profile,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def _update_model(self, model: LocalUserModel, user: LocalUser) -> None:
        model.email = user.email
        model.username = user.username
        model.display_name = user.display_name
        model.roles = sorted(role.value for role in user.roles)
        model.first_name = user.first_name
        model.last_name = user.last_name
        model.description = user.description
        model.locale = user.locale
        model.nickname = user.nickname
        model.profile = user.profile
        model.updated_at = user.updated_at
