"""Unit tests for ProviderApiClient using httpx.MockTransport."""

import json

import httpx
import pytest

from bridge.domain.identity import ProviderConnectionError, SyncFailedError
from bridge.infrastructure.provider import ProviderApiClient
from bridge_auth import SignatureValidator

SECRET = "provider-signing-secret"
FIXED_NOW = 1_700_000_000


def make_client(handler):
    signer = SignatureValidator(SECRET, clock=lambda: FIXED_NOW)
    return ProviderApiClient(
        base_url="http://provider.test/api/",
        signer=signer,
        transport=httpx.MockTransport(handler),
    )


class TestRequestSigning:
    @pytest.mark.asyncio
    async def test_requests_carry_signature_headers(self):
        # Arrange
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"valid": True})

        client = make_client(handler)

        # Act
        await client.verify_session("p1", "tok")
        await client.close()

        # Assert
        request = seen[0]
        validator = SignatureValidator(SECRET, clock=lambda: FIXED_NOW)
        assert request.url == "http://provider.test/api/bridge/sessions/verify"
        assert request.headers["X-Timestamp"] == str(FIXED_NOW)
        assert validator.validate(
            request.headers["X-Timestamp"],
            request.headers["X-Signature"],
        )
        assert json.loads(request.content) == {"user_id": "p1", "token": "tok"}


class TestVerifySession:
    @pytest.mark.asyncio
    async def test_valid_session(self):
        client = make_client(lambda r: httpx.Response(200, json={"valid": True}))

        assert await client.verify_session("p1", "tok") is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403, 404])
    async def test_rejecting_statuses_mean_no_session(self, status):
        client = make_client(lambda r: httpx.Response(status))

        assert await client.verify_session("p1", "tok") is False

    @pytest.mark.asyncio
    async def test_server_error_is_connection_error(self):
        client = make_client(lambda r: httpx.Response(503, text="down"))

        with pytest.raises(ProviderConnectionError):
            await client.verify_session("p1", "tok")

    @pytest.mark.asyncio
    async def test_connect_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = make_client(handler)

        with pytest.raises(ProviderConnectionError, match="connection failed"):
            await client.verify_session("p1", "tok")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = make_client(handler)

        with pytest.raises(ProviderConnectionError, match="timed out"):
            await client.verify_session("p1", "tok")


class TestCreateSession:
    @pytest.mark.asyncio
    async def test_grant_is_parsed(self):
        client = make_client(
            lambda r: httpx.Response(
                200,
                json={"token": "prov-tok", "expires_at": "2030-01-01T00:00:00Z"},
            ),
        )

        grant = await client.create_session("p1")

        assert grant.token == "prov-tok"
        assert grant.expires_at.year == 2030
        assert grant.expires_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_missing_token(self):
        client = make_client(lambda r: httpx.Response(200, json={}))

        with pytest.raises(SyncFailedError):
            await client.create_session("p1")

    @pytest.mark.asyncio
    async def test_client_error_is_sync_failure(self):
        client = make_client(lambda r: httpx.Response(400, json={"error": "bad"}))

        with pytest.raises(SyncFailedError, match="400"):
            await client.create_session("p1")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client = make_client(lambda r: httpx.Response(200, text="<html>"))

        with pytest.raises(SyncFailedError, match="invalid JSON"):
            await client.create_session("p1")


class TestListUsers:
    @pytest.mark.asyncio
    async def test_directory_is_parsed_and_bad_entries_skipped(self):
        payload = {
            "users": [
                {
                    "id": 7,
                    "email": "a@example.com",
                    "name": "A",
                    "roles": ["admin"],
                    "metadata": {"plan": "pro"},
                },
                {"user_id": "p2", "email": None},
                {"email": "noid@example.com"},
            ],
        }
        client = make_client(lambda r: httpx.Response(200, json=payload))

        users = await client.list_users()

        assert [u.provider_user_id for u in users] == ["7", "p2"]
        assert users[0].roles == ("admin",)
        assert users[0].metadata == {"plan": "pro"}
        assert users[1].email is None

    @pytest.mark.asyncio
    async def test_plain_list_body(self):
        client = make_client(lambda r: httpx.Response(200, json=[{"id": "p1"}]))

        users = await client.list_users()

        assert users[0].provider_user_id == "p1"
