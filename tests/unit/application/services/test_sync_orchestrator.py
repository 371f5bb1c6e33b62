"""Unit tests for SyncOrchestrator."""

from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from bridge.application.dtos import LocalLink, ProviderLink
from bridge.application.ports import ProviderDirectoryUser
from bridge.application.retry import RetryPolicy
from bridge.application.services import SyncOrchestrator
from bridge.domain.identity import (
    IdentityMapping,
    LocalUser,
    LocalUserNotFoundError,
    MissingDataError,
    ProviderConnectionError,
    ProviderUser,
    SyncFailedError,
    SyncSource,
    SyncState,
    SyncStatus,
)
from bridge.domain.shared.events import ProfileSynced, ProfileSyncFailed


class ImmediateTransaction:
    async def run(self, fn):
        return await fn()


async def no_sleep(_seconds):
    return None


class OrchestratorTestBase:
    def setup_method(self):
        self.mapper = AsyncMock()
        self.local_users = AsyncMock()
        self.sync_states = AsyncMock()
        self.provider_users = AsyncMock()
        self.provider_users.username_exists.return_value = False
        self.mappings = AsyncMock()
        self.events = Mock()
        self.events.publish = AsyncMock()
        self.provider_api = AsyncMock()

        self.user = LocalUser.create(
            email="jane@example.com",
            username="jane",
            display_name="Jane",
        )
        self.local_users.find_by_id.return_value = self.user
        self.state = SyncState.empty(self.user.id)
        self.sync_states.get_or_create.return_value = self.state

        self.orchestrator = SyncOrchestrator(
            mapper=self.mapper,
            local_users=self.local_users,
            sync_states=self.sync_states,
            provider_users=self.provider_users,
            mappings=self.mappings,
            provider_transaction=ImmediateTransaction(),
            events=self.events,
            provider_api=self.provider_api,
            profile_retry=RetryPolicy.exponential(3, 1.0, no_sleep),
        )


class TestPushProfileSync(OrchestratorTestBase):
    """Tests for pushing one profile."""

    @pytest.mark.asyncio
    async def test_writes_snapshot_and_marks_synced(self):
        # Arrange
        provider_user = ProviderUser(email="old@example.com", username="jane", id="p1")
        self.mapper.ensure_provider_user.return_value = ProviderLink(
            self.user.id,
            "p1",
            created=True,
        )
        self.provider_users.find_by_id.return_value = provider_user

        # Act
        result = await self.orchestrator.push_profile_sync(self.user.id)

        # Assert
        assert result.provider_user_id == "p1"
        assert result.created_mapping is True
        assert provider_user.email == "jane@example.com"
        assert provider_user.name == "Jane"
        self.provider_users.upsert_meta.assert_awaited_once_with(
            "p1",
            "last_synced_at",
            result.synced_at.isoformat(),
        )
        assert self.state.sync_status == SyncStatus.SYNCED
        assert self.state.last_synced_at == result.synced_at
        assert isinstance(self.events.publish.call_args.args[0], ProfileSynced)

    @pytest.mark.asyncio
    async def test_source_is_passed_to_mapper(self):
        self.mapper.ensure_provider_user.return_value = ProviderLink(
            self.user.id,
            "p1",
            created=True,
        )
        self.provider_users.find_by_id.return_value = None

        await self.orchestrator.push_profile_sync(self.user.id, source=SyncSource.POLICY)

        self.mapper.ensure_provider_user.assert_awaited_once_with(
            self.user,
            SyncSource.POLICY,
        )
        saved = self.provider_users.save.call_args.args[0]
        assert saved.id == "p1"

    @pytest.mark.asyncio
    async def test_unknown_user(self):
        self.local_users.find_by_id.return_value = None

        with pytest.raises(LocalUserNotFoundError):
            await self.orchestrator.push_profile_sync(uuid4())

    @pytest.mark.asyncio
    async def test_write_failure_marks_state_failed(self):
        # Arrange
        self.mapper.ensure_provider_user.return_value = ProviderLink(
            self.user.id,
            "p1",
            created=False,
        )
        self.provider_users.find_by_id.side_effect = RuntimeError("deadlock")

        # Act & Assert
        with pytest.raises(SyncFailedError):
            await self.orchestrator.push_profile_sync(self.user.id)

        assert self.state.sync_status == SyncStatus.SYNC_FAILED
        assert "deadlock" in self.state.last_error
        event = self.events.publish.call_args.args[0]
        assert isinstance(event, ProfileSyncFailed)
        assert event.error_code == "SYNC_FAILED"

    @pytest.mark.asyncio
    async def test_connection_error_keeps_its_type(self):
        self.mapper.ensure_provider_user.side_effect = ProviderConnectionError()

        with pytest.raises(ProviderConnectionError):
            await self.orchestrator.push_profile_sync(self.user.id)

        assert self.state.sync_status == SyncStatus.SYNC_FAILED


class TestBulkSync(OrchestratorTestBase):
    """Tests for bulk reconciliation."""

    @pytest.mark.asyncio
    async def test_mixed_outcomes_land_in_one_bucket_each(self):
        # Arrange: 2 already mapped, 3 new, 1 failing
        users = [
            LocalUser.create(email=f"u{i}@example.com", username=f"u{i}")
            for i in range(6)
        ]
        outcomes = {
            users[0].id: ProviderLink(users[0].id, "p0", created=False),
            users[1].id: ProviderLink(users[1].id, "p1", created=False),
            users[2].id: ProviderLink(users[2].id, "p2", created=True),
            users[3].id: ProviderLink(users[3].id, "p3", created=True),
            users[4].id: ProviderLink(users[4].id, "p4", created=True),
        }

        async def ensure(user, _source):
            if user.id not in outcomes:
                raise SyncFailedError("provider down")
            return outcomes[user.id]

        self.mapper.ensure_provider_user.side_effect = ensure
        self.local_users.list_all.return_value = users

        # Act
        result = await self.orchestrator.bulk_sync_all()

        # Assert
        assert len(result.skipped) == 2
        assert len(result.synced) == 3
        assert len(result.failed) == 1
        assert result.total == 6
        assert result.success is False
        failed = result.failed[0]
        assert failed.user_ref == str(users[5].id)
        assert failed.email == "u5@example.com"
        assert failed.error == "provider down"
        assert "error" in result.to_dict()["failed"][0]

    @pytest.mark.asyncio
    async def test_empty_store(self):
        self.local_users.list_all.return_value = []

        result = await self.orchestrator.bulk_sync_all()

        assert result.total == 0
        assert result.success is True


class TestPullProviderDirectory(OrchestratorTestBase):
    """Tests for pulling the provider's user list."""

    @pytest.mark.asyncio
    async def test_pull_links_creates_and_reports_failures(self):
        # Arrange
        linked_id, existing_id = uuid4(), uuid4()
        self.provider_api.list_users.return_value = [
            ProviderDirectoryUser("p1", "new@example.com"),
            ProviderDirectoryUser("p2", "old@example.com"),
            ProviderDirectoryUser("p3", None),
        ]
        self.mapper.link_or_create_local_user.side_effect = [
            LocalLink(linked_id, "p1", created=True, linked=True),
            LocalLink(existing_id, "p2"),
            MissingDataError("email"),
        ]

        # Act
        result = await self.orchestrator.pull_provider_directory()

        # Assert
        assert [e.user_ref for e in result.synced] == [str(linked_id)]
        assert [e.user_ref for e in result.skipped] == [str(existing_id)]
        assert result.failed[0].user_ref == "p3"
        assert "email" in result.failed[0].error

    @pytest.mark.asyncio
    async def test_unreachable_provider_propagates(self):
        self.provider_api.list_users.side_effect = ProviderConnectionError()

        with pytest.raises(ProviderConnectionError):
            await self.orchestrator.pull_provider_directory()


class TestOnProfileUpdated(OrchestratorTestBase):
    """Tests for resyncing after local profile changes."""

    @pytest.mark.asyncio
    async def test_irrelevant_fields_are_ignored(self):
        result = await self.orchestrator.on_profile_updated(self.user.id, ["avatar_url"])

        assert result is None
        self.mappings.find_by_local_user_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_unmapped_user_is_not_synced(self):
        self.mappings.find_by_local_user_id.return_value = None

        result = await self.orchestrator.on_profile_updated(self.user.id, ["locale"])

        assert result is None
        self.mapper.ensure_provider_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_mapped_user_is_retried_until_success(self):
        # Arrange
        self.mappings.find_by_local_user_id.return_value = IdentityMapping.create(
            self.user.id,
            "p1",
        )
        self.mapper.ensure_provider_user.side_effect = [
            ProviderConnectionError(),
            ProviderLink(self.user.id, "p1", created=False),
        ]
        self.provider_users.find_by_id.return_value = None

        # Act
        result = await self.orchestrator.on_profile_updated(
            self.user.id,
            ["display_name"],
        )

        # Assert
        assert result is not None
        assert self.mapper.ensure_provider_user.await_count == 2
        assert self.state.sync_status == SyncStatus.SYNCED

    @pytest.mark.asyncio
    async def test_exhausted_retries_return_none(self):
        self.mappings.find_by_local_user_id.return_value = IdentityMapping.create(
            self.user.id,
            "p1",
        )
        self.mapper.ensure_provider_user.side_effect = ProviderConnectionError()

        result = await self.orchestrator.on_profile_updated(self.user.id, ["roles"])

        assert result is None
        assert self.mapper.ensure_provider_user.await_count == 3
        assert self.state.sync_status == SyncStatus.SYNC_FAILED


class TestGetSyncStatus(OrchestratorTestBase):
    @pytest.mark.asyncio
    async def test_unlinked_user(self):
        self.mappings.find_by_local_user_id.return_value = None
        self.sync_states.find.return_value = None

        info = await self.orchestrator.get_sync_status(self.user.id)

        assert info.linked is False
        assert info.to_dict()["sync_status"] is None

    @pytest.mark.asyncio
    async def test_linked_user(self):
        self.state.mark_synced()
        self.state.tag_source(SyncSource.POLICY)
        self.mappings.find_by_local_user_id.return_value = IdentityMapping.create(
            self.user.id,
            "p1",
        )
        self.sync_states.find.return_value = self.state

        info = await self.orchestrator.get_sync_status(self.user.id)

        assert info.provider_user_id == "p1"
        assert info.sync_status == "synced"
        assert info.sync_source == "policy"
