"""
Session / OTP Endpoints
POST /auth/verify              - confirm an email OTP token hash
POST /auth/logout              - global Supabase sign-out, clears the cookie
POST /api/set-session-cookie   - store the client's Supabase session server-side
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cryptofolio.api.schemas import SetSessionRequest, VerifyRequest
from cryptofolio.auth.session import clear_session_cookie, get_session, set_session_cookie
from cryptofolio.core.errors import UpstreamError
from cryptofolio.domain.models import Session
from cryptofolio.providers.supabase import SupabaseClient, get_supabase_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/auth/verify")
async def verify(body: VerifyRequest, supabase: SupabaseClient = Depends(get_supabase_client)):
    try:
        await supabase.verify_otp(body.token, otp_type=body.type)
    except UpstreamError as exc:
        logger.warning("OTP verification failed: %s", exc)
        return JSONResponse(status_code=500, content={"success": False, "error": exc.message})
    return {"success": True}


@router.post("/auth/logout")
async def logout(
    session: Optional[Session] = Depends(get_session),
    supabase: SupabaseClient = Depends(get_supabase_client),
):
    """Sign out everywhere.  The cookie is cleared even if Supabase is
    unreachable so the browser is logged out locally."""
    if session is not None and session.access_token:
        try:
            await supabase.logout(session.access_token)
        except UpstreamError as exc:
            logger.warning("Supabase logout failed for user %s: %s", session.user.id, exc)
    response = JSONResponse({"success": True})
    clear_session_cookie(response)
    return response


@router.post("/api/set-session-cookie")
async def set_session(body: SetSessionRequest):
    if not body.session:
        return JSONResponse(status_code=400, content={"error": "No session provided"})
    response = JSONResponse({"success": True})
    set_session_cookie(response, body.session)
    return response
