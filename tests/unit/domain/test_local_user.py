"""Unit tests for the LocalUser aggregate."""

import pytest

from bridge.domain.identity import LocalRole, LocalUser


class TestLocalUserCreate:
    def test_create_normalizes_email_and_defaults(self):
        user = LocalUser.create(email="  Ada@Example.COM ", username="ada")

        assert user.email == "ada@example.com"
        assert user.display_name == "ada"
        assert user.roles == frozenset({LocalRole.SUBSCRIBER})
        assert not user.is_admin

    def test_create_with_roles(self):
        user = LocalUser.create(
            email="root@example.com",
            username="root",
            roles=["Administrator", LocalRole.EDITOR],
        )

        assert user.roles == frozenset({LocalRole.ADMINISTRATOR, LocalRole.EDITOR})
        assert user.is_admin

    def test_invalid_email_raises(self):
        with pytest.raises(ValueError, match="Invalid email"):
            LocalUser.create(email="nope", username="x")

    def test_unknown_role_raises(self):
        with pytest.raises(ValueError):
            LocalUser.create(email="a@example.com", username="a", roles=["wizard"])


class TestLocalUserRoles:
    def setup_method(self):
        self.user = LocalUser.create(email="a@example.com", username="a")

    def test_assign_roles_reports_change(self):
        assert self.user.assign_roles([LocalRole.EDITOR]) is True
        assert self.user.roles == frozenset({LocalRole.EDITOR})

    def test_assign_same_roles_is_no_change(self):
        assert self.user.assign_roles([LocalRole.SUBSCRIBER]) is False

    def test_assign_empty_roles_falls_back_to_default(self):
        self.user.assign_roles([LocalRole.EDITOR])

        self.user.assign_roles([])

        assert self.user.roles == frozenset({LocalRole.SUBSCRIBER})

    def test_has_any_role(self):
        assert self.user.has_any_role({LocalRole.SUBSCRIBER, LocalRole.EDITOR})
        assert not self.user.has_any_role({LocalRole.EDITOR})


class TestLocalUserProfile:
    def setup_method(self):
        self.user = LocalUser.create(email="a@example.com", username="a")

    def test_update_profile_returns_changed_fields(self):
        changed = self.user.update_profile(
            {"display_name": "Ada", "first_name": "Ada", "avatar_url": "http://x/a.png"},
        )

        assert changed == ["display_name", "first_name", "avatar_url"]
        assert self.user.display_name == "Ada"
        assert self.user.profile["avatar_url"] == "http://x/a.png"

    def test_unknown_fields_are_ignored(self):
        assert self.user.update_profile({"password": "x", "email": "b@x"}) == []
        assert self.user.email == "a@example.com"

    def test_unchanged_values_are_not_reported(self):
        self.user.update_profile({"locale": "de_DE"})

        assert self.user.update_profile({"locale": "de_DE"}) == []

    def test_empty_display_name_is_ignored(self):
        assert self.user.update_profile({"display_name": ""}) == []
        assert self.user.display_name == "a"
