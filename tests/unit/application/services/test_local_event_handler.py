"""Unit tests for LocalEventHandler."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from bridge.application.dtos import parse_local_event
from bridge.application.services import LocalEventHandler
from bridge.domain.identity import LocalRole, LocalUser, LocalUserNotFoundError
from bridge.domain.shared.exceptions import ConflictError, ValidationError


class TestLocalEventHandler:
    def setup_method(self):
        self.local_users = AsyncMock()
        self.local_users.find_by_email.return_value = None
        self.local_users.username_exists.return_value = False
        self.policy = AsyncMock()
        self.policy.evaluate_user.return_value = None
        self.orchestrator = AsyncMock()

        self.handler = LocalEventHandler(
            local_users=self.local_users,
            policy_engine=self.policy,
            orchestrator=self.orchestrator,
        )

    async def _handle(self, payload):
        return await self.handler.handle_event(parse_local_event(payload))

    @pytest.mark.asyncio
    async def test_registration_creates_user_and_evaluates_policy(self):
        # Arrange
        self.policy.evaluate_user.return_value = "synced"

        # Act
        result = await self._handle(
            {
                "event": "user.registered",
                "email": "root@example.com",
                "username": "root",
                "roles": ["administrator"],
            },
        )

        # Assert
        user = self.local_users.save.call_args.args[0]
        assert user.roles == frozenset({LocalRole.ADMINISTRATOR})
        assert result.local_user_id == user.id
        assert result.action == "synced"
        self.policy.evaluate_user.assert_awaited_once_with(user)

    @pytest.mark.asyncio
    async def test_registration_defaults_to_subscriber(self):
        result = await self._handle(
            {"event": "user.registered", "email": "a@example.com", "username": "a"},
        )

        user = self.local_users.save.call_args.args[0]
        assert user.roles == frozenset({LocalRole.SUBSCRIBER})
        assert result.action == "registered"

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict(self):
        self.local_users.find_by_email.return_value = LocalUser.create(
            email="a@example.com",
            username="a",
        )

        with pytest.raises(ConflictError):
            await self._handle(
                {"event": "user.registered", "email": "a@example.com", "username": "b"},
            )

    @pytest.mark.asyncio
    async def test_unknown_role_on_registration(self):
        with pytest.raises(ValidationError):
            await self._handle(
                {
                    "event": "user.registered",
                    "email": "a@example.com",
                    "username": "a",
                    "roles": ["wizard"],
                },
            )

        self.local_users.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_login_goes_to_policy(self):
        user_id = uuid4()
        self.policy.on_login.return_value = "synced"

        result = await self._handle({"event": "user.login", "user_id": str(user_id)})

        self.policy.on_login.assert_awaited_once_with(user_id)
        assert result.action == "synced"

    @pytest.mark.asyncio
    async def test_role_change_without_policy_action_resyncs_roles(self):
        user_id = uuid4()
        self.policy.on_role_change.return_value = None

        result = await self._handle(
            {"event": "user.role_changed", "user_id": str(user_id), "roles": ["editor"]},
        )

        self.policy.on_role_change.assert_awaited_once_with(user_id, ["editor"])
        self.orchestrator.on_profile_updated.assert_awaited_once_with(user_id, ["roles"])
        assert result.changed_fields == ("roles",)

    @pytest.mark.asyncio
    async def test_role_change_with_unsync_does_not_resync(self):
        self.policy.on_role_change.return_value = "unsynced"

        result = await self._handle(
            {"event": "user.role_changed", "user_id": str(uuid4()), "roles": ["author"]},
        )

        assert result.action == "unsynced"
        self.orchestrator.on_profile_updated.assert_not_called()

    @pytest.mark.asyncio
    async def test_profile_update_syncs_changed_fields(self):
        # Arrange
        user = LocalUser.create(email="a@example.com", username="a")
        self.local_users.find_by_id.return_value = user

        # Act
        result = await self._handle(
            {
                "event": "user.profile_updated",
                "user_id": str(user.id),
                "fields": {"locale": "de_DE", "password": "x"},
            },
        )

        # Assert
        assert user.locale == "de_DE"
        self.orchestrator.on_profile_updated.assert_awaited_once_with(user.id, ["locale"])
        assert result.action == "synced"
        assert result.changed_fields == ("locale",)

    @pytest.mark.asyncio
    async def test_profile_update_without_changes(self):
        user = LocalUser.create(email="a@example.com", username="a")
        self.local_users.find_by_id.return_value = user

        result = await self._handle(
            {"event": "user.profile_updated", "user_id": str(user.id), "fields": {"x": 1}},
        )

        assert result.changed_fields == ()
        self.local_users.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_profile_update_of_unknown_user(self):
        self.local_users.find_by_id.return_value = None

        with pytest.raises(LocalUserNotFoundError):
            await self._handle(
                {
                    "event": "user.profile_updated",
                    "user_id": str(uuid4()),
                    "fields": {"locale": "de"},
                },
            )
