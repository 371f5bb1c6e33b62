"""Scoped transactions over an AsyncSession."""

import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bridge.domain.identity import ProviderConnectionError, SyncFailedError
from bridge.domain.shared.exceptions import DomainException

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SQLAlchemyTransactionScope:
    """Commit when the unit of work returns, roll back when it raises.

    Connection-level database errors become ProviderConnectionError and
    any other SQLAlchemy error becomes SyncFailedError. Domain exceptions
    raised by the unit of work pass through unchanged after the rollback.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            result = await fn()
            await self._session.commit()
        except DomainException:
            await self._rollback()
            raise
        except (OperationalError, InterfaceError) as e:
            await self._rollback()
            logger.warning("Auth provider store unreachable: %s", e)
            raise ProviderConnectionError(f"Auth provider store unreachable: {e}") from e
        except SQLAlchemyError as e:
            await self._rollback()
            logger.warning("Auth provider store write failed: %s", e)
            raise SyncFailedError(f"Auth provider store write failed: {e}") from e
        except Exception:
            await self._rollback()
            raise
        return result

    async def _rollback(self) -> None:
        try:
            await self._session.rollback()
        except SQLAlchemyError as e:
            # The original error is re-raised by the caller
            logger.warning("Rollback failed: %s", e)
