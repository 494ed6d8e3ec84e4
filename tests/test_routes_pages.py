from __future__ import annotations

import json

import pytest
from starlette.requests import Request

from cryptofolio.core.errors import AuthorizationDenied, AuthSessionMissing, UpstreamHttpError
from cryptofolio.routers import pages

USERS = [
    {"id": "admin-1", "email": "admin@example.com", "created_at": "2024-01-01T00:00:00Z"},
    {"id": "user-2", "email": "bob@example.com", "created_at": "2024-02-01T00:00:00Z",
     "last_sign_in_at": "2024-03-01T00:00:00Z"},
    {"id": "user-3", "email": "carol@example.com"},
    {"id": "phone-4", "phone": "+15550100"},
]
PAYMENTS = [{"user_id": "user-2", "plan": "pro", "status": "active", "amount": 19.99}]


class FakeSupabase:
    def __init__(self, admin_ids=("admin-1",), fail=None):
        self.admin_ids = set(admin_ids)
        self.fail = fail or set()
        self.calls = []

    async def select_admin_rows(self, user_id):
        self.calls.append(("select_admin_rows", user_id))
        return [{"id": 1}] if user_id in self.admin_ids else []

    async def list_users(self):
        self.calls.append(("list_users",))
        if "list_users" in self.fail:
            raise UpstreamHttpError("supabase", 500, "boom")
        return USERS

    async def list_payments(self):
        self.calls.append(("list_payments",))
        return PAYMENTS

    async def delete_payments(self, user_id):
        self.calls.append(("delete_payments", user_id))
        if "delete_payments" in self.fail:
            raise UpstreamHttpError("supabase", 500, "fk")

    async def delete_user(self, user_id):
        self.calls.append(("delete_user", user_id))
        if "delete_user" in self.fail:
            raise UpstreamHttpError("supabase", 404, "User not found")


def _admin(make_session):
    return make_session(user_id="admin-1", email="admin@example.com")


def _json_request(body, raw: bytes = None) -> Request:
    payload = raw if raw is not None else json.dumps(body).encode()

    async def receive():
        return {"type": "http.request", "body": payload, "more_body": False}

    scope = {"type": "http", "method": "POST", "path": "/api/admin/delete-user", "query_string": b"",
             "headers": [(b"content-type", b"application/json")]}
    return Request(scope, receive)


@pytest.mark.asyncio
async def test_layout_data_anonymous():
    store = FakeSupabase()
    result = await pages.layout_data(session=None, store=store)
    assert result.model_dump(by_alias=True) == {"userEmail": None, "isAdmin": False}
    assert store.calls == []


@pytest.mark.asyncio
async def test_layout_data_admin(make_session):
    result = await pages.layout_data(session=_admin(make_session), store=FakeSupabase())
    assert result.model_dump(by_alias=True) == {"userEmail": "admin@example.com", "isAdmin": True}


@pytest.mark.asyncio
async def test_dashboard_requires_session():
    with pytest.raises(AuthSessionMissing):
        await pages.dashboard_data(session=None, store=FakeSupabase())


@pytest.mark.asyncio
async def test_dashboard_for_regular_user(make_session):
    result = await pages.dashboard_data(session=make_session(user_id="user-2", email="bob@example.com"),
                                        store=FakeSupabase())
    assert result.user_email == "bob@example.com"
    assert result.is_admin is False


@pytest.mark.asyncio
async def test_admin_data_joins_payments_and_hides_self(make_session):
    supabase = FakeSupabase()
    result = await pages.admin_data(session=_admin(make_session), supabase=supabase)

    assert result.admin_email == "admin@example.com"
    rows = {r.email: r for r in result.users}
    assert set(rows) == {"bob@example.com", "carol@example.com"}
    assert rows["bob@example.com"].plan == "pro"
    assert rows["bob@example.com"].status == "active"
    assert rows["bob@example.com"].amount == 19.99
    assert rows["bob@example.com"].last_sign_in_at == "2024-03-01T00:00:00Z"
    assert rows["carol@example.com"].plan == "N/A"
    assert rows["carol@example.com"].status == "inactive"
    assert rows["carol@example.com"].amount == 0


@pytest.mark.asyncio
async def test_admin_data_denies_non_admin(make_session):
    supabase = FakeSupabase()
    with pytest.raises(AuthorizationDenied):
        await pages.admin_data(session=make_session(user_id="user-2"), supabase=supabase)
    assert ("list_users",) not in supabase.calls


@pytest.mark.asyncio
async def test_admin_data_upstream_failure(make_session):
    resp = await pages.admin_data(session=_admin(make_session), supabase=FakeSupabase(fail={"list_users"}))
    assert resp.status_code == 500
    assert "error" in json.loads(resp.body)


@pytest.mark.asyncio
async def test_delete_user_removes_payments_first(make_session):
    supabase = FakeSupabase()
    result = await pages.delete_user(_json_request({"userId": "user-2"}), session=_admin(make_session),
                                     supabase=supabase)
    assert result == {"success": True}
    assert supabase.calls[-2:] == [("delete_payments", "user-2"), ("delete_user", "user-2")]


@pytest.mark.asyncio
@pytest.mark.parametrize("who", [None, "user-2"])
async def test_delete_user_requires_admin(make_session, who):
    supabase = FakeSupabase()
    session = make_session(user_id=who) if who else None
    resp = await pages.delete_user(_json_request({"userId": "user-3"}), session=session, supabase=supabase)
    assert resp.status_code == 401
    assert json.loads(resp.body) == {"message": "Unauthorized"}
    assert not any(c[0].startswith("delete") for c in supabase.calls)


@pytest.mark.asyncio
async def test_delete_user_stops_when_payments_fail(make_session):
    supabase = FakeSupabase(fail={"delete_payments"})
    resp = await pages.delete_user(_json_request({"userId": "user-2"}), session=_admin(make_session),
                                   supabase=supabase)
    assert resp.status_code == 500
    assert json.loads(resp.body) == {"message": "Failed to delete payment records"}
    assert ("delete_user", "user-2") not in supabase.calls


@pytest.mark.asyncio
async def test_delete_user_failure(make_session):
    supabase = FakeSupabase(fail={"delete_user"})
    resp = await pages.delete_user(_json_request({"userId": "user-2"}), session=_admin(make_session),
                                   supabase=supabase)
    assert resp.status_code == 500
    assert json.loads(resp.body) == {"message": "Failed to delete user"}


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", [b"not json", b"{}", b'{"userId": ""}'])
async def test_delete_user_bad_body_from_anonymous_is_401(raw):
    supabase = FakeSupabase()
    resp = await pages.delete_user(_json_request(None, raw=raw), session=None, supabase=supabase)
    assert resp.status_code == 401
    assert json.loads(resp.body) == {"message": "Unauthorized"}


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", [b"not json", b"{}", b'{"userId": ""}'])
async def test_delete_user_bad_body_from_admin_is_400(make_session, raw):
    supabase = FakeSupabase()
    resp = await pages.delete_user(_json_request(None, raw=raw), session=_admin(make_session), supabase=supabase)
    assert resp.status_code == 400
    assert not any(c[0].startswith("delete") for c in supabase.calls)
