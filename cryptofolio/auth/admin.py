"""
Admin gate.

A user is an administrator when the authorization store holds at least one
``admin_users`` row for their id.  The check runs on every page load; there
is no caching across requests.

Two variants:
  • ``check_admin``  : returns an ``AdminState`` (layout/dashboard data)
  • ``require_admin``: raises ``AuthSessionMissing`` / ``AuthorizationDenied``
                        which the app turns into 303 redirects
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from cryptofolio.core.errors import AuthorizationDenied, AuthSessionMissing, UpstreamError
from cryptofolio.domain.models import AdminState, Session

logger = logging.getLogger(__name__)


class AdminStore(Protocol):
    async def select_admin_rows(self, user_id: str) -> List[dict]:
        ...


async def is_admin_user(store: AdminStore, user_id: str) -> bool:
    """True when ``store`` lists ``user_id``.  A store failure counts as
    "not an admin"."""
    try:
        rows = await store.select_admin_rows(user_id)
    except UpstreamError as exc:
        logger.warning("Admin lookup failed for user %s: %s", user_id, exc)
        return False
    return len(rows) > 0


async def check_admin(session: Optional[Session], store: AdminStore) -> AdminState:
    state = AdminState()
    if session is None:
        state.checked_status = True
        return state
    state.is_admin = await is_admin_user(store, session.user.id)
    state.checked_status = True
    return state


def require_session(session: Optional[Session]) -> Session:
    if session is None:
        raise AuthSessionMissing()
    return session


async def require_admin(session: Optional[Session], store: AdminStore) -> Session:
    session = require_session(session)
    if not await is_admin_user(store, session.user.id):
        logger.info("Non-admin user %s denied admin page", session.user.id)
        raise AuthorizationDenied(session.user.id)
    return session
