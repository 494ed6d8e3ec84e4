"""
Session cookie handling.

The front end stores the Supabase session as URL-encoded JSON in the
``sb-session`` cookie (see ``POST /api/set-session-cookie``).  A missing or
malformed cookie simply means "no session".  The cookie is unsigned, so
its ``access_token`` is checked with Supabase on every request and a
cookie without a valid token also means "no session".
"""

from __future__ import annotations

import json
import logging
from typing import Optional
from urllib.parse import quote, unquote

from fastapi import Depends, Request, Response

from cryptofolio import config
from cryptofolio.core.errors import UpstreamError
from cryptofolio.domain.models import Session, SessionUser
from cryptofolio.providers.supabase import SupabaseClient, get_supabase_client

logger = logging.getLogger(__name__)


def parse_session_cookie(raw: Optional[str]) -> Optional[Session]:
    """Decode a session cookie value, returning None when unusable."""
    if not raw:
        return None
    try:
        payload = json.loads(unquote(raw))
    except ValueError:
        logger.debug("Ignoring malformed session cookie")
        return None
    return Session.from_dict(payload)


async def resolve_session(supabase: SupabaseClient, access_token: Optional[str]) -> Optional[Session]:
    """Ask Supabase who owns ``access_token``.

    The user id and email in the cookie are client-supplied and never
    trusted; only the identity GoTrue returns for the token is used.
    """
    if not access_token:
        return None
    try:
        user = await supabase.get_user(access_token)
    except UpstreamError as exc:
        logger.info("Session token rejected: %s", exc)
        return None
    return Session(
        user=SessionUser(id=str(user["id"]), email=user.get("email")),
        access_token=access_token,
    )


async def get_session(
    request: Request,
    supabase: SupabaseClient = Depends(get_supabase_client),
) -> Optional[Session]:
    """FastAPI dependency: the caller's verified session, or None."""
    cookie_session = parse_session_cookie(request.cookies.get(config.SESSION_COOKIE_NAME))
    if cookie_session is None:
        return None
    return await resolve_session(supabase, cookie_session.access_token)


def set_session_cookie(response: Response, session_payload: dict) -> None:
    response.set_cookie(
        config.SESSION_COOKIE_NAME,
        quote(json.dumps(session_payload, separators=(",", ":"))),
        path="/",
        httponly=True,
        secure=not config.DEV_MODE,
        samesite="strict",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        config.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=not config.DEV_MODE,
        samesite="strict",
    )
