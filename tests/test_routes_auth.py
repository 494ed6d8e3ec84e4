from __future__ import annotations

import json

import pytest

from cryptofolio.api.schemas import SetSessionRequest, VerifyRequest
from cryptofolio.core.errors import AuthProviderError, UpstreamHttpError
from cryptofolio.routers import auth


class FakeSupabase:
    def __init__(self, verify_error=None, logout_error=None):
        self.verify_error = verify_error
        self.logout_error = logout_error
        self.verified = []
        self.logged_out = []

    async def verify_otp(self, token_hash, otp_type="magiclink"):
        self.verified.append((token_hash, otp_type))
        if self.verify_error is not None:
            raise self.verify_error
        return {"access_token": "a"}

    async def logout(self, access_token):
        self.logged_out.append(access_token)
        if self.logout_error is not None:
            raise self.logout_error


@pytest.mark.asyncio
async def test_verify_success():
    supabase = FakeSupabase()
    result = await auth.verify(VerifyRequest(token="hash-1"), supabase=supabase)
    assert result == {"success": True}
    assert supabase.verified == [("hash-1", "magiclink")]


@pytest.mark.asyncio
async def test_verify_passes_requested_type():
    supabase = FakeSupabase()
    await auth.verify(VerifyRequest(token="hash-2", type="signup"), supabase=supabase)
    assert supabase.verified == [("hash-2", "signup")]


@pytest.mark.asyncio
async def test_verify_rejected_token_reports_provider_message():
    supabase = FakeSupabase(verify_error=AuthProviderError("supabase", "Token has expired or is invalid"))
    resp = await auth.verify(VerifyRequest(token="stale"), supabase=supabase)
    assert resp.status_code == 500
    assert json.loads(resp.body) == {"success": False, "error": "Token has expired or is invalid"}


def test_verify_request_requires_token():
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        VerifyRequest(token="")


@pytest.mark.asyncio
async def test_logout_revokes_and_clears_cookie(make_session):
    supabase = FakeSupabase()
    resp = await auth.logout(session=make_session(access_token="tok-1"), supabase=supabase)
    assert json.loads(resp.body) == {"success": True}
    assert supabase.logged_out == ["tok-1"]
    assert "max-age=0" in resp.headers["set-cookie"].lower()


@pytest.mark.asyncio
async def test_logout_clears_cookie_when_provider_is_down(make_session):
    supabase = FakeSupabase(logout_error=UpstreamHttpError("supabase", None, "timed out"))
    resp = await auth.logout(session=make_session(), supabase=supabase)
    assert resp.status_code == 200
    assert resp.headers["set-cookie"].startswith("sb-session=")


@pytest.mark.asyncio
async def test_logout_without_session_skips_provider():
    supabase = FakeSupabase()
    resp = await auth.logout(session=None, supabase=supabase)
    assert resp.status_code == 200
    assert supabase.logged_out == []


@pytest.mark.asyncio
async def test_set_session_cookie_route():
    payload = {"access_token": "tok", "user": {"id": "u-1", "email": "a@example.com"}}
    resp = await auth.set_session(SetSessionRequest(session=payload))
    assert json.loads(resp.body) == {"success": True}
    assert resp.headers["set-cookie"].startswith("sb-session=")


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [SetSessionRequest(), SetSessionRequest(session={})])
async def test_set_session_cookie_requires_session(body):
    resp = await auth.set_session(body)
    assert resp.status_code == 400
    assert json.loads(resp.body) == {"error": "No session provided"}
    assert "set-cookie" not in resp.headers
