"""HTTP client for the auth provider's bridge API."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx
from bridge_auth import SignatureValidator

from bridge.application.ports import (
    ProviderApiPort,
    ProviderDirectoryUser,
    ProviderSessionGrant,
)
from bridge.domain.identity import ProviderConnectionError, SyncFailedError
from bridge.domain.shared.time import ensure_tz_aware

logger = logging.getLogger(__name__)

# Answers that mean "no such session" rather than "provider broken"
_REJECTING_STATUSES = frozenset({401, 403, 404})


class ProviderApiClient(ProviderApiPort):
    """Signed httpx client for the provider's session and user endpoints.

    Every request carries fresh ``X-Timestamp``/``X-Signature`` headers.
    Connection failures, timeouts and 5xx answers raise
    ProviderConnectionError.
    """

    def __init__(
        self,
        base_url: str,
        signer: SignatureValidator,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._signer = signer
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def verify_session(self, provider_user_id: str, token: str) -> bool:
        response = await self._request(
            "POST",
            "/bridge/sessions/verify",
            json={"user_id": provider_user_id, "token": token},
            allowed_statuses=_REJECTING_STATUSES,
        )
        if response.status_code in _REJECTING_STATUSES:
            logger.info(
                "Auth provider rejected session of %s (%d)",
                provider_user_id,
                response.status_code,
            )
            return False
        return bool(self._json(response).get("valid", False))

    async def create_session(self, provider_user_id: str) -> ProviderSessionGrant:
        response = await self._request(
            "POST",
            "/bridge/sessions",
            json={"user_id": provider_user_id},
        )
        data = self._json(response)
        token = data.get("token") or data.get("session_token")
        if not token:
            raise SyncFailedError("Auth provider returned no session token")

        return ProviderSessionGrant(
            token=token,
            expires_at=_parse_datetime(data.get("expires_at")),
        )

    async def list_users(self) -> list[ProviderDirectoryUser]:
        response = await self._request("GET", "/bridge/users")
        data = self._json(response)
        items = data.get("users", []) if isinstance(data, dict) else data

        users = []
        for item in items:
            user_id = item.get("id") or item.get("user_id")
            if not user_id:
                logger.warning("Skipping provider user without id: %s", item)
                continue
            users.append(
                ProviderDirectoryUser(
                    provider_user_id=str(user_id),
                    email=item.get("email"),
                    name=item.get("name"),
                    roles=tuple(item.get("roles") or ()),
                    metadata=dict(item.get("metadata") or {}),
                ),
            )
        return users

    async def _request(
        self,
        method: str,
        path: str,
        allowed_statuses: frozenset[int] = frozenset(),
        **kwargs: Any,
    ) -> httpx.Response:
        client = await self._get_client()
        try:
            response = await client.request(
                method,
                path,
                headers=self._signer.sign_headers(),
                **kwargs,
            )
            if response.status_code not in allowed_statuses:
                response.raise_for_status()
            return response
        except httpx.ConnectError as e:
            logger.warning("Auth provider connection failed: %s", e)
            msg = f"Auth provider connection failed: {e}"
            raise ProviderConnectionError(msg) from e
        except httpx.TimeoutException as e:
            logger.warning("Auth provider timeout: %s", e)
            raise ProviderConnectionError("Auth provider timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Auth provider returned error %d: %s",
                e.response.status_code,
                e.response.text[:200] if e.response.text else "no body",
            )
            if e.response.status_code >= 500:
                raise ProviderConnectionError(
                    f"Auth provider error {e.response.status_code}",
                ) from e
            raise SyncFailedError(
                f"Auth provider rejected request ({e.response.status_code})",
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Auth provider request failed (%s): %s", type(e).__name__, e)
            raise ProviderConnectionError(f"Auth provider request failed: {e}") from e

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise SyncFailedError("Auth provider returned invalid JSON") from e


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        return ensure_tz_aware(parsed)
    except ValueError:
        logger.debug("Unparseable provider datetime: %s", value)
        return None
