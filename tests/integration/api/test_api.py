"""API tests for the bridge endpoints."""

import base64
import json

import jwt

from bridge_auth import SignatureValidator

API = "/api/v1"


def register(client, signed, name, *roles):
    response = client.post(
        f"{API}/local-events",
        headers=signed(),
        json={
            "event": "user.registered",
            "email": f"{name}@example.com",
            "username": name,
            "roles": list(roles),
        },
    )
    assert response.status_code == 200, response.text
    return response.json()


def provider_token(subject):
    return jwt.encode({"sub": subject}, "provider-side-secret", algorithm="HS256")


def _segment(data):
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root_lists_endpoints(self, client):
        assert client.get("/").json()["api_base"] == API


class TestSignatures:
    def test_missing_signature(self, client):
        response = client.post(
            f"{API}/bridge/remote-users",
            json={"user_id": "p1", "email": "a@example.com"},
        )

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_SIGNATURE"

    def test_stale_timestamp(self, client, settings):
        old = SignatureValidator(
            settings.bridge_shared_secret.get_secret_value(),
            clock=lambda: 1_000_000,
        ).sign_headers()

        response = client.post(f"{API}/webhooks/provider", headers=old, json={})

        assert response.status_code == 401

    def test_non_ascii_signature(self, client, signed):
        headers = {
            "X-Timestamp": signed()["X-Timestamp"],
            "X-Signature": "\u00e9".encode("latin-1") * 64,
        }

        response = client.post(
            f"{API}/webhooks/provider",
            headers=headers,
            json={"event": "session.ended", "user_id": "p1"},
        )

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_SIGNATURE"


class TestRemoteUsers:
    def test_create_then_link_is_idempotent(self, client, signed):
        # Act
        first = client.post(
            f"{API}/bridge/remote-users",
            headers=signed(),
            json={"user_id": "p1", "email": "Ada@example.com", "name": "Ada"},
        )
        second = client.post(
            f"{API}/bridge/remote-users",
            headers=signed(),
            json={"user_id": "p1", "email": "ada@example.com"},
        )

        # Assert
        assert first.status_code == 200
        assert first.json()["created"] is True
        assert first.json()["linked"] is True
        assert second.json()["user_id"] == first.json()["user_id"]
        assert second.json()["linked"] is False

    def test_missing_email(self, client, signed):
        response = client.post(
            f"{API}/bridge/remote-users",
            headers=signed(),
            json={"user_id": "p1"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_DATA"


class TestSessions:
    def test_session_cookie_lifecycle(self, client, signed):
        # Arrange: administrators are auto-synced on registration
        registered = register(client, signed, "root", "administrator")
        assert registered["action"] == "synced"

        # Act
        created = client.post(
            f"{API}/bridge/local-sessions",
            headers=signed(),
            json={"user_id": registered["user_id"]},
        )
        check = client.get(f"{API}/sessions/check")
        ended = client.delete(f"{API}/sessions/current")
        after = client.get(f"{API}/sessions/check")

        # Assert
        assert created.status_code == 201
        body = created.json()
        assert body["token_type"] == "bearer"
        assert check.json()["logged_in"] is True
        assert check.json()["session_token"] == body["session_token"]
        assert ended.json()["ended"] is True
        assert after.json()["logged_in"] is False

    def test_unlinked_user_cannot_open_session(self, client, signed):
        registered = register(client, signed, "writer", "author")

        response = client.post(
            f"{API}/bridge/local-sessions",
            headers=signed(),
            json={"user_id": registered["user_id"]},
        )

        assert response.status_code == 409
        assert response.json()["code"] == "NOT_LINKED"

    def test_anonymous_check(self, client):
        assert client.get(f"{API}/sessions/check").json()["logged_in"] is False

    def test_exchange_token(self, client, signed, provider_api):
        registered = register(client, signed, "root", "administrator")

        response = client.post(
            f"{API}/bridge/exchange-token",
            headers=signed(),
            json={"user_id": registered["user_id"]},
        )

        assert response.status_code == 200
        assert response.json()["provider_token"] == provider_api.issued[0]


class TestWebhooksAndTokens:
    def test_user_updated_then_token_resolves(self, client, signed):
        # Arrange
        linked = client.post(
            f"{API}/bridge/remote-users",
            headers=signed(),
            json={"user_id": "p-9", "email": "jane@example.com"},
        ).json()

        # Act
        webhook = client.post(
            f"{API}/webhooks/provider",
            headers=signed(),
            json={
                "event": "user.updated",
                "userId": "p-9",
                "roles": ["admin"],
                "metadata": {"name": "Jane"},
            },
        )
        me = client.get(
            f"{API}/bridge/me",
            headers={"Authorization": f"Bearer {provider_token('p-9')}"},
        )

        # Assert
        assert webhook.status_code == 200
        assert webhook.json()["action"] == "user_updated"
        assert me.status_code == 200
        body = me.json()
        assert body["user_id"] == linked["user_id"]
        assert body["roles"] == ["administrator"]
        assert body["display_name"] == "Jane"
        assert body["remote_verified"] is True
        assert body["session_refreshed"] is True

    def test_revoked_provider_session(self, client, signed, provider_api):
        client.post(
            f"{API}/bridge/remote-users",
            headers=signed(),
            json={"user_id": "p-9", "email": "jane@example.com"},
        )
        provider_api.live_sessions = False

        me = client.get(
            f"{API}/bridge/me",
            headers={"Authorization": f"Bearer {provider_token('p-9')}"},
        )

        assert me.status_code == 401
        assert me.json()["code"] == "SESSION_INVALID"

    def test_me_without_token(self, client):
        response = client.get(f"{API}/bridge/me")

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_me_with_non_string_key_id(self, client):
        token = ".".join(
            [_segment({"alg": "HS256", "kid": 123}), _segment({"sub": "p1"}), "c2ln"],
        )

        response = client.get(
            f"{API}/bridge/me",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_webhook_for_unmapped_user(self, client, signed):
        response = client.post(
            f"{API}/webhooks/provider",
            headers=signed(),
            json={"event": "session.ended", "user_id": "ghost"},
        )

        assert response.status_code == 404
        assert response.json()["code"] == "USER_NOT_FOUND"

    def test_unsupported_webhook_event(self, client, signed):
        response = client.post(
            f"{API}/webhooks/provider",
            headers=signed(),
            json={"event": "user.exploded", "user_id": "p1"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_EVENT"

    def test_webhook_body_must_be_json(self, client, signed):
        response = client.post(
            f"{API}/webhooks/provider",
            headers={**signed(), "Content-Type": "application/json"},
            content=b"{not json",
        )

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_DATA"


class TestAdmin:
    def test_requires_token(self, client):
        assert client.get(f"{API}/admin/policy").status_code == 401

    def test_requires_admin_role(self, client, signed, bearer_for):
        user = register(client, signed, "writer", "author")

        response = client.get(
            f"{API}/admin/policy",
            headers=bearer_for(user["user_id"], "writer@example.com"),
        )

        assert response.status_code == 403

    def test_policy_update_syncs_editors(self, client, signed, bearer_for):
        # Arrange
        admin = register(client, signed, "root", "administrator")
        editor = register(client, signed, "ed", "editor")
        headers = bearer_for(admin["user_id"], "root@example.com")

        # Act
        response = client.put(
            f"{API}/admin/policy",
            headers=headers,
            json={"roles": ["administrator", "editor"]},
        )
        status = client.get(f"{API}/admin/sync/users/{editor['user_id']}", headers=headers)

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["policy"]["auto_sync_roles"] == ["administrator", "editor"]
        assert body["added_roles"] == ["editor"]
        assert body["synced"] == [editor["user_id"]]
        assert status.json()["linked"] is True
        assert status.json()["sync_source"] == "policy"

    def test_unknown_role_in_policy(self, client, signed, bearer_for):
        admin = register(client, signed, "root", "administrator")

        response = client.put(
            f"{API}/admin/policy",
            headers=bearer_for(admin["user_id"], "root@example.com"),
            json={"roles": ["wizard"]},
        )

        assert response.status_code == 400

    def test_bulk_sync_and_unsync(self, client, signed, bearer_for):
        # Arrange
        admin = register(client, signed, "root", "administrator")
        writer = register(client, signed, "writer", "author")
        headers = bearer_for(admin["user_id"], "root@example.com")

        # Act
        bulk = client.post(f"{API}/admin/sync/bulk", headers=headers)
        unsync = client.delete(
            f"{API}/admin/sync/users/{writer['user_id']}",
            headers=headers,
        )
        again = client.delete(
            f"{API}/admin/sync/users/{writer['user_id']}",
            headers=headers,
        )

        # Assert
        assert bulk.status_code == 200
        assert [e["user"] for e in bulk.json()["synced"]] == [writer["user_id"]]
        assert [e["user"] for e in bulk.json()["skipped"]] == [admin["user_id"]]
        assert unsync.status_code == 200
        assert again.status_code == 409
        assert again.json()["code"] == "NOT_LINKED"

    def test_active_sessions_report(self, client, signed, bearer_for):
        admin = register(client, signed, "root", "administrator")
        client.post(
            f"{API}/bridge/local-sessions",
            headers=signed(),
            json={"user_id": admin["user_id"]},
        )

        response = client.get(
            f"{API}/admin/sessions/active",
            headers=bearer_for(admin["user_id"], "root@example.com"),
        )

        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["sessions"][0]["username"] == "root"
