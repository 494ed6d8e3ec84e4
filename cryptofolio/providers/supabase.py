"""
Supabase REST client (PostgREST + GoTrue).

Covers the admin authorization store (``admin_users``), OTP verification,
logout, and the handful of admin-only user management calls.  Table reads
and admin calls use the service-role key; end-user auth calls use the anon
key.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from cryptofolio import config
from cryptofolio.core.constants import ADMIN_USERS_TABLE, DEFAULT_OTP_TYPE, USER_PAYMENTS_TABLE
from cryptofolio.core.errors import AuthProviderError, UpstreamHttpError, UpstreamParseError
from cryptofolio.providers.base import UpstreamClient

logger = logging.getLogger(__name__)


def _auth_error_message(detail: str) -> str:
    """Pull the human-readable message out of a GoTrue error body."""
    try:
        body = json.loads(detail)
    except ValueError:
        return detail or "authentication failed"
    if isinstance(body, dict):
        for field in ("msg", "error_description", "message", "error"):
            if body.get(field):
                return str(body[field])
    return detail or "authentication failed"


class SupabaseClient(UpstreamClient):
    provider = "supabase"

    def __init__(
        self,
        url: Optional[str] = None,
        anon_key: Optional[str] = None,
        service_role_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(timeout=timeout, transport=transport)
        self._url = (url or config.SUPABASE_URL).rstrip("/")
        self._anon_key = anon_key if anon_key is not None else config.PUBLIC_SUPABASE_ANON_KEY
        self._service_key = (
            service_role_key if service_role_key is not None else config.SUPABASE_SERVICE_ROLE_KEY
        )

    def _headers(self, key: str, bearer: Optional[str] = None) -> Dict[str, str]:
        return {
            "apikey": key,
            "Authorization": f"Bearer {bearer or key}",
            "Cache-Control": "no-cache",
        }

    def _service_headers(self) -> Dict[str, str]:
        return self._headers(self._service_key)

    # ------------------------------------------------------------------
    # PostgREST tables
    # ------------------------------------------------------------------

    async def _select(self, table: str, params: Dict[str, str]) -> List[dict]:
        rows = await self._request_json(
            "GET", f"{self._url}/rest/v1/{table}",
            headers=self._service_headers(), params=params,
        )
        if not isinstance(rows, list):
            raise UpstreamParseError(self.provider, f"{table}: expected a list of rows")
        return rows

    async def select_admin_rows(self, user_id: str) -> List[dict]:
        """Rows of ``admin_users`` for ``user_id`` (empty for non-admins)."""
        return await self._select(ADMIN_USERS_TABLE, {"select": "id", "user_id": f"eq.{user_id}"})

    async def list_payments(self) -> List[dict]:
        return await self._select(USER_PAYMENTS_TABLE, {"select": "*"})

    async def delete_payments(self, user_id: str) -> None:
        await self._send(
            "DELETE", f"{self._url}/rest/v1/{USER_PAYMENTS_TABLE}",
            headers=self._service_headers(), params={"user_id": f"eq.{user_id}"},
        )

    # ------------------------------------------------------------------
    # GoTrue auth
    # ------------------------------------------------------------------

    async def verify_otp(self, token_hash: str, otp_type: str = DEFAULT_OTP_TYPE) -> dict:
        """Confirm a magic-link / signup token hash.  Returns the session
        payload GoTrue issues on success."""
        try:
            payload = await self._request_json(
                "POST", f"{self._url}/auth/v1/verify",
                headers=self._headers(self._anon_key),
                json={"type": otp_type, "token_hash": token_hash},
            )
        except UpstreamHttpError as exc:
            if exc.status_code is not None and 400 <= exc.status_code < 500:
                raise AuthProviderError(self.provider, _auth_error_message(exc.detail)) from exc
            raise
        return payload if isinstance(payload, dict) else {}

    async def get_user(self, access_token: str) -> dict:
        """The user GoTrue issued ``access_token`` to.  An expired or forged
        token is rejected with ``AuthProviderError``."""
        try:
            payload = await self._request_json(
                "GET", f"{self._url}/auth/v1/user",
                headers=self._headers(self._anon_key, bearer=access_token),
            )
        except UpstreamHttpError as exc:
            if exc.status_code is not None and 400 <= exc.status_code < 500:
                raise AuthProviderError(self.provider, _auth_error_message(exc.detail)) from exc
            raise
        if not isinstance(payload, dict) or not payload.get("id"):
            raise UpstreamParseError(self.provider, "auth/v1/user: response has no user id")
        return payload

    async def logout(self, access_token: str) -> None:
        """Revoke every refresh token of the session's user."""
        await self._send(
            "POST", f"{self._url}/auth/v1/logout",
            headers=self._headers(self._anon_key, bearer=access_token),
            params={"scope": "global"},
        )

    async def list_users(self) -> List[dict]:
        body: Any = await self._request_json(
            "GET", f"{self._url}/auth/v1/admin/users", headers=self._service_headers(),
        )
        # GoTrue has returned both a bare list and {"users": [...]}
        if isinstance(body, list):
            return body
        if isinstance(body, dict):
            users = body.get("users")
            if users is None and isinstance(body.get("data"), dict):
                users = body["data"].get("users")
            if isinstance(users, list):
                return users
        raise UpstreamParseError(self.provider, "admin/users: unexpected response shape")

    async def delete_user(self, user_id: str) -> None:
        await self._send(
            "DELETE", f"{self._url}/auth/v1/admin/users/{user_id}",
            headers=self._service_headers(),
        )


def get_supabase_client() -> SupabaseClient:
    """FastAPI dependency."""
    return SupabaseClient()
