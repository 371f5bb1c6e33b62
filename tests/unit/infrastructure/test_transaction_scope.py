"""Unit tests for SQLAlchemyTransactionScope."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from bridge.domain.identity import (
    MappingAlreadyExistsError,
    ProviderConnectionError,
    SyncFailedError,
)
from bridge.infrastructure.persistence.sqlalchemy.transaction import (
    SQLAlchemyTransactionScope,
)


class TestSQLAlchemyTransactionScope:
    def setup_method(self):
        self.session = AsyncMock()
        self.scope = SQLAlchemyTransactionScope(self.session)

    @pytest.mark.asyncio
    async def test_commits_and_returns_result(self):
        async def work():
            return 42

        assert await self.scope.run(work) == 42
        self.session.commit.assert_awaited_once()
        self.session.rollback.assert_not_called()

    @pytest.mark.asyncio
    async def test_domain_errors_roll_back_and_pass_through(self):
        async def work():
            raise MappingAlreadyExistsError(None, "p1")

        with pytest.raises(MappingAlreadyExistsError):
            await self.scope.run(work)

        self.session.rollback.assert_awaited_once()
        self.session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_operational_error_is_connection_error(self):
        async def work():
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        with pytest.raises(ProviderConnectionError):
            await self.scope.run(work)

        self.session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_database_errors_are_sync_failures(self):
        self.session.commit.side_effect = IntegrityError("INSERT", {}, Exception("dup"))

        async def work():
            return None

        with pytest.raises(SyncFailedError):
            await self.scope.run(work)

        self.session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unexpected_errors_roll_back_and_propagate(self):
        async def work():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await self.scope.run(work)

        self.session.rollback.assert_awaited_once()
