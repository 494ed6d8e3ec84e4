"""
Pytest configuration and shared fixtures.

Fixtures available to all tests:
  • memory_cache         : fresh MemoryCacheBackend installed as the singleton
  • ed25519_cdp_key      : a throwaway CDP signing key
  • json_transport(...)  : httpx.MockTransport answering with fixed JSON
  • session_cookie(...)  : encoded ``sb-session`` cookie value
  • make_session(...)    : a parsed Session
"""

from __future__ import annotations

import json
import os
import sys
from typing import Any, Callable, List, Optional
from urllib.parse import quote

import httpx
import pytest
from cryptography.hazmat.primitives.asymmetric import ed25519

# Ensure the project root is on the path so ``cryptofolio`` resolves without install.
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from cryptofolio import cache_backend  # noqa: E402
from cryptofolio.core.errors import AuthProviderError  # noqa: E402
from cryptofolio.domain.models import Session, SessionUser  # noqa: E402
from cryptofolio.providers.coinbase_jwt import CdpKey, clear_key_cache  # noqa: E402


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_cache(monkeypatch):
    backend = cache_backend.MemoryCacheBackend()
    cache_backend.reset_cache_backend_for_tests()
    monkeypatch.setattr(cache_backend, "_backend_singleton", backend)
    yield backend
    cache_backend.reset_cache_backend_for_tests()


@pytest.fixture(autouse=True)
def _clear_cdp_key_cache():
    clear_key_cache()
    yield
    clear_key_cache()


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------

@pytest.fixture
def ed25519_cdp_key() -> CdpKey:
    return CdpKey(
        name="organizations/test-org/apiKeys/test-key",
        algorithm="EdDSA",
        private_key=ed25519.Ed25519PrivateKey.generate(),
    )


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.fixture
def json_transport() -> Callable[..., httpx.MockTransport]:
    """Factory: a transport that records requests and answers with ``body``."""
    def _factory(
        body: Any = None,
        status_code: int = 200,
        seen: Optional[List[httpx.Request]] = None,
    ) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            if seen is not None:
                seen.append(request)
            if body is None:
                return httpx.Response(status_code)
            return httpx.Response(status_code, json=body)
        return httpx.MockTransport(handler)
    return _factory


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

@pytest.fixture
def make_session() -> Callable[..., Session]:
    def _factory(user_id: str = "user-1", email: str = "alice@example.com",
                 access_token: Optional[str] = "access-abc") -> Session:
        return Session(user=SessionUser(id=user_id, email=email), access_token=access_token)
    return _factory


@pytest.fixture
def session_cookie() -> Callable[..., str]:
    def _factory(user_id: str = "user-1", email: str = "alice@example.com",
                 access_token: Optional[str] = "access-abc") -> str:
        payload = {"user": {"id": user_id, "email": email}}
        if access_token is not None:
            payload["access_token"] = access_token
        return quote(json.dumps(payload))
    return _factory


class FakeAdminStore:
    """Authorization store double that counts lookups."""

    def __init__(self, admin_ids=(), error: Optional[Exception] = None):
        self.admin_ids = set(admin_ids)
        self.error = error
        self.calls: List[str] = []

    async def select_admin_rows(self, user_id: str):
        self.calls.append(user_id)
        if self.error is not None:
            raise self.error
        return [{"id": 1}] if user_id in self.admin_ids else []


@pytest.fixture
def admin_store_factory():
    return FakeAdminStore


class FakeSupabaseAuth:
    """GoTrue double: resolves access tokens to users and counts admin lookups."""

    def __init__(self, users_by_token=None, admin_ids=()):
        self.users_by_token = dict(users_by_token or {})
        self.admin_ids = set(admin_ids)
        self.calls: List[tuple] = []

    async def get_user(self, access_token: str) -> dict:
        self.calls.append(("get_user", access_token))
        user = self.users_by_token.get(access_token)
        if user is None:
            raise AuthProviderError("supabase", "invalid JWT")
        return user

    async def select_admin_rows(self, user_id: str):
        self.calls.append(("select_admin_rows", user_id))
        return [{"id": 1}] if user_id in self.admin_ids else []


@pytest.fixture
def supabase_auth_factory():
    return FakeSupabaseAuth
