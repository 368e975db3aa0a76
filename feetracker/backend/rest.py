"""Backend implemented over a hosted PostgREST/GoTrue style HTTP service.

Tables live under ``/rest/v1/<table>`` and accounts under ``/auth/v1``. The
project's public API key is sent on every call; data calls made on behalf of a
signed-in user carry that user's access token so row-level policies apply.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx
from fastapi.encoders import jsonable_encoder

from feetracker.backend.base import (
    Backend,
    BackendAuthError,
    BackendConflictError,
    BackendError,
    BackendNotFoundError,
    BackendSession,
    BackendUser,
    Filters,
    Row,
)

logger = logging.getLogger(__name__)

# Postgres error code for unique_violation
UNIQUE_VIOLATION = "23505"


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _user_from_payload(payload: Dict[str, Any]) -> BackendUser:
    try:
        return BackendUser(id=UUID(str(payload["id"])), email=payload.get("email") or "")
    except (KeyError, ValueError) as e:
        raise BackendError("Malformed user payload") from e


class RestBackend(Backend):
    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        access_token: Optional[str] = None,
        timeout: Optional[float] = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._access_token = access_token
        self._client = client or httpx.AsyncClient(base_url=self._base_url, timeout=timeout)

    def with_token(self, access_token: str) -> "RestBackend":
        return RestBackend(
            self._base_url,
            self._api_key,
            access_token=access_token,
            client=self._client,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self, token: Optional[str] = None, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {token or self._access_token or self._api_key}",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    @staticmethod
    def _params(filters: Optional[Filters]) -> Dict[str, str]:
        return {
            column: "is.null" if value is None else f"eq.{_filter_value(value)}"
            for column, value in (filters or {}).items()
        }

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise BackendError("Network error while contacting the backend") from e
        if response.status_code >= 400:
            raise self._error_from(response)
        return response

    @staticmethod
    def _error_from(response: httpx.Response) -> BackendError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
            or f"Backend request failed ({response.status_code})"
        )
        if response.status_code == 409 or body.get("code") == UNIQUE_VIOLATION:
            return BackendConflictError(message)
        if response.status_code in (401, 403) or str(response.url.path).startswith("/auth/v1/token"):
            return BackendAuthError(message)
        if response.status_code == 404:
            return BackendNotFoundError(message)
        return BackendError(message)

    # --- Data ---
    async def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        params = {"select": "*", **self._params(filters)}
        if order_by is not None:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)
        response = await self._request("GET", f"/rest/v1/{table}", params=params, headers=self._headers())
        return response.json()

    async def insert(self, table: str, values: Row) -> Row:
        response = await self._request(
            "POST",
            f"/rest/v1/{table}",
            json=jsonable_encoder(values),
            headers=self._headers(prefer="return=representation"),
        )
        rows = response.json()
        if not rows:
            raise BackendError(f'Insert into "{table}" returned no row')
        return rows[0]

    async def update(self, table: str, filters: Filters, values: Row) -> List[Row]:
        response = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=self._params(filters),
            json=jsonable_encoder(values),
            headers=self._headers(prefer="return=representation"),
        )
        return response.json()

    async def delete(self, table: str, filters: Filters) -> int:
        response = await self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params=self._params(filters),
            headers=self._headers(prefer="return=representation"),
        )
        return len(response.json())

    # --- Auth ---
    async def sign_in_with_password(self, email: str, password: str) -> BackendSession:
        response = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers=self._headers(token=self._api_key),
        )
        payload = response.json()
        return BackendSession(
            access_token=payload["access_token"],
            user=_user_from_payload(payload.get("user") or {}),
        )

    async def sign_out(self, access_token: str) -> None:
        await self._request("POST", "/auth/v1/logout", headers=self._headers(token=access_token))

    async def get_user(self, access_token: str) -> BackendUser:
        response = await self._request("GET", "/auth/v1/user", headers=self._headers(token=access_token))
        return _user_from_payload(response.json())

    # --- Account administration ---
    async def create_user(self, email: str, password: Optional[str] = None) -> BackendUser:
        if password:
            response = await self._request(
                "POST",
                "/auth/v1/admin/users",
                json={"email": email, "password": password, "email_confirm": True},
                headers=self._headers(),
            )
        else:
            response = await self._request(
                "POST", "/auth/v1/invite", json={"email": email}, headers=self._headers()
            )
        payload = response.json()
        return _user_from_payload(payload.get("user", payload))

    async def delete_user(self, user_id: UUID) -> None:
        await self._request("DELETE", f"/auth/v1/admin/users/{user_id}", headers=self._headers())

    async def list_users(self) -> List[BackendUser]:
        response = await self._request("GET", "/auth/v1/admin/users", headers=self._headers())
        payload = response.json()
        users = payload.get("users", []) if isinstance(payload, dict) else payload
        return [_user_from_payload(u) for u in users]
