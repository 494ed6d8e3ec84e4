from __future__ import annotations

import pytest

from cryptofolio.auth.admin import check_admin, is_admin_user, require_admin, require_session
from cryptofolio.core.errors import AuthorizationDenied, AuthSessionMissing, UpstreamHttpError


@pytest.mark.asyncio
async def test_no_session_is_checked_without_a_lookup(admin_store_factory):
    store = admin_store_factory(admin_ids={"user-1"})
    state = await check_admin(None, store)
    assert state.is_admin is False
    assert state.checked_status is True
    assert store.calls == []


@pytest.mark.asyncio
async def test_admin_session_queries_store_once(admin_store_factory, make_session):
    store = admin_store_factory(admin_ids={"user-1"})
    state = await check_admin(make_session(user_id="user-1"), store)
    assert state.is_admin is True
    assert state.checked_status is True
    assert store.calls == ["user-1"]


@pytest.mark.asyncio
async def test_non_admin_session(admin_store_factory, make_session):
    store = admin_store_factory(admin_ids={"someone-else"})
    state = await check_admin(make_session(user_id="user-2"), store)
    assert state.is_admin is False
    assert state.checked_status is True
    assert store.calls == ["user-2"]


@pytest.mark.asyncio
async def test_store_failure_counts_as_not_admin(admin_store_factory, make_session):
    store = admin_store_factory(admin_ids={"user-1"}, error=UpstreamHttpError("supabase", 503))
    assert await is_admin_user(store, "user-1") is False
    state = await check_admin(make_session(user_id="user-1"), store)
    assert state.is_admin is False
    assert state.checked_status is True


@pytest.mark.asyncio
async def test_each_check_hits_the_store(admin_store_factory, make_session):
    store = admin_store_factory(admin_ids={"user-1"})
    session = make_session(user_id="user-1")
    await check_admin(session, store)
    await check_admin(session, store)
    assert store.calls == ["user-1", "user-1"]


def test_require_session_raises_with_login_redirect(make_session):
    with pytest.raises(AuthSessionMissing) as exc:
        require_session(None)
    assert exc.value.redirect_to == "/auth/login"
    session = make_session()
    assert require_session(session) is session


@pytest.mark.asyncio
async def test_require_admin_denies_non_admins(admin_store_factory, make_session):
    store = admin_store_factory()
    with pytest.raises(AuthorizationDenied) as exc:
        await require_admin(make_session(user_id="user-3"), store)
    assert exc.value.redirect_to == "/dashboard"
    assert exc.value.user_id == "user-3"


@pytest.mark.asyncio
async def test_require_admin_without_session_skips_lookup(admin_store_factory):
    store = admin_store_factory(admin_ids={"user-1"})
    with pytest.raises(AuthSessionMissing):
        await require_admin(None, store)
    assert store.calls == []


@pytest.mark.asyncio
async def test_require_admin_returns_session(admin_store_factory, make_session):
    store = admin_store_factory(admin_ids={"user-1"})
    session = make_session(user_id="user-1")
    assert await require_admin(session, store) is session
