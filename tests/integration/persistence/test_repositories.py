"""Integration tests for the SQLAlchemy repositories."""

from datetime import timedelta

import pytest

from bridge.domain.identity import (
    IdentityMapping,
    LocalRole,
    LocalUser,
    MappingAlreadyExistsError,
    ProviderUser,
    SyncSource,
    SyncState,
)
from bridge.domain.session import Session
from bridge.domain.shared.exceptions import ConflictError
from bridge.domain.shared.time import utc_now

pytestmark = pytest.mark.integration


class TestLocalUserRepository:
    async def test_save_and_reload(self, repo_factory):
        # Arrange
        repo = repo_factory.local_user_repository()
        user = LocalUser.create(
            email="jane@example.com",
            username="jane",
            roles=[LocalRole.EDITOR],
        )
        user.update_profile({"locale": "de_DE", "subscription_plan": "pro"})

        # Act
        await repo.save(user)
        loaded = await repo.find_by_id(user.id)

        # Assert
        assert loaded.email == "jane@example.com"
        assert loaded.roles == frozenset({LocalRole.EDITOR})
        assert loaded.locale == "de_DE"
        assert loaded.profile["subscription_plan"] == "pro"

    async def test_find_by_email_is_case_insensitive(self, repo_factory):
        repo = repo_factory.local_user_repository()
        await repo.save(LocalUser.create(email="jane@example.com", username="jane"))

        assert await repo.find_by_email("JANE@example.com") is not None

    async def test_duplicate_email_is_conflict(self, repo_factory):
        repo = repo_factory.local_user_repository()
        await repo.save(LocalUser.create(email="jane@example.com", username="jane"))

        with pytest.raises(ConflictError):
            await repo.save(LocalUser.create(email="jane@example.com", username="j2"))

    async def test_list_with_any_role(self, repo_factory):
        repo = repo_factory.local_user_repository()
        editor = LocalUser.create(email="e@example.com", username="e", roles=["editor"])
        await repo.save(editor)
        await repo.save(LocalUser.create(email="s@example.com", username="s"))

        found = await repo.list_with_any_role({LocalRole.EDITOR})

        assert [u.id for u in found] == [editor.id]


class TestSyncStateRepository:
    async def test_round_trip_and_session_lookup(self, repo_factory):
        # Arrange
        users = repo_factory.local_user_repository()
        states = repo_factory.sync_state_repository()
        user = LocalUser.create(email="jane@example.com", username="jane")
        await users.save(user)
        state = SyncState.empty(user.id)
        state.cache_session("tok")
        state.tag_source(SyncSource.POLICY)
        state.record_snapshot({"name": "Jane"})

        # Act
        await states.save(state)
        by_token = await states.find_by_session_token("tok")

        # Assert
        assert by_token.local_user_id == user.id
        assert by_token.sync_source == SyncSource.POLICY
        assert by_token.metadata_snapshot == {"name": "Jane"}
        assert [s.local_user_id for s in await states.list_with_session()] == [user.id]

    async def test_get_or_create(self, repo_factory):
        states = repo_factory.sync_state_repository()
        user = LocalUser.create(email="jane@example.com", username="jane")
        await repo_factory.local_user_repository().save(user)

        state = await states.get_or_create(user.id)

        assert state.local_user_id == user.id
        assert state.sync_status is None


class TestIdentityMappingRepository:
    async def test_both_sides_are_unique(self, repo_factory):
        # Arrange
        mappings = repo_factory.mapping_repository()
        tx = repo_factory.provider_transaction
        first = IdentityMapping.create(
            LocalUser.create(email="a@example.com", username="a").id,
            "p1",
        )
        await tx.run(lambda: mappings.add(first))

        # Act & Assert
        with pytest.raises(MappingAlreadyExistsError):
            await tx.run(
                lambda: mappings.add(IdentityMapping.create(first.local_user_id, "p2")),
            )
        with pytest.raises(MappingAlreadyExistsError):
            await tx.run(
                lambda: mappings.add(
                    IdentityMapping.create(
                        LocalUser.create(email="b@example.com", username="b").id,
                        "p1",
                    ),
                ),
            )

        found = await mappings.find_by_provider_user_id("p1")
        assert found.local_user_id == first.local_user_id


class TestProviderRepositories:
    async def test_provider_user_and_meta(self, repo_factory):
        users = repo_factory.provider_user_repository()
        user = ProviderUser(email="a@example.com", username="a", metadata={"x": 1})

        async def write():
            await users.save(user)
            await users.upsert_meta(user.id, "last_synced_at", "t1")
            await users.upsert_meta(user.id, "last_synced_at", "t2")

        await repo_factory.provider_transaction.run(write)

        assert (await users.find_by_id(user.id)).metadata == {"x": 1}
        assert await users.username_exists("a")
        assert await users.get_meta(user.id, "last_synced_at") == "t2"

    async def test_sessions_expire_and_delete(self, repo_factory):
        sessions = repo_factory.session_repository()
        live = Session.start("p1", timedelta(hours=1))
        stale = Session("stale", "p1", expires_at=utc_now() - timedelta(minutes=1))

        async def write():
            await sessions.save(live)
            await sessions.save(stale)

        await repo_factory.provider_transaction.run(write)

        removed = await repo_factory.provider_transaction.run(
            lambda: sessions.delete_expired(utc_now()),
        )

        assert removed == 1
        assert (await sessions.find_by_token(live.token)).is_active()
        assert await sessions.find_by_token("stale") is None
