"""Unit tests for the AutoSyncPolicy value object."""

import pytest

from bridge.domain.identity import LocalRole
from bridge.domain.policy import AutoSyncPolicy

ADMIN = LocalRole.ADMINISTRATOR
EDITOR = LocalRole.EDITOR
AUTHOR = LocalRole.AUTHOR


class TestAutoSyncPolicy:
    def test_build_filters_locked_roles(self):
        policy, rejected = AutoSyncPolicy.build({ADMIN, EDITOR}, locked={EDITOR})

        assert policy.auto_sync_roles == frozenset({ADMIN})
        assert rejected == frozenset({EDITOR})

    def test_overlap_is_rejected_on_direct_construction(self):
        with pytest.raises(ValueError, match="Locked roles"):
            AutoSyncPolicy(frozenset({ADMIN}), frozenset({ADMIN}))

    def test_should_auto_sync(self):
        policy = AutoSyncPolicy(frozenset({ADMIN}))

        assert policy.should_auto_sync({ADMIN, AUTHOR})
        assert not policy.should_auto_sync({AUTHOR})

    def test_diff_from(self):
        policy = AutoSyncPolicy(frozenset({ADMIN, EDITOR}))

        diff = policy.diff_from({ADMIN, AUTHOR})

        assert diff.added == frozenset({EDITOR})
        assert diff.removed == frozenset({AUTHOR})
        assert not diff.is_empty

    def test_diff_from_same_roles_is_empty(self):
        policy = AutoSyncPolicy(frozenset({ADMIN}))

        assert policy.diff_from({ADMIN}).is_empty
