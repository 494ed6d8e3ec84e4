"""
Page-data Endpoints (server-side loads for the front end)
GET  /api/session             - root layout: who is signed in, are they admin
GET  /dashboard/data          - same, but requires a session (303 to login)
GET  /admin/data              - admin-only user list (303 for everyone else)
POST /api/admin/delete-user   - admin-only: remove a user and their payments
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from cryptofolio.api.responses import error_response
from cryptofolio.api.schemas import AdminPageResponse, AdminUserRow, DeleteUserRequest, SessionDataResponse
from cryptofolio.auth.admin import check_admin, is_admin_user, require_admin, require_session
from cryptofolio.auth.session import get_session
from cryptofolio.core.errors import UpstreamError
from cryptofolio.domain.models import Session
from cryptofolio.providers.supabase import SupabaseClient, get_supabase_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])


@router.get("/api/session", response_model=SessionDataResponse)
async def layout_data(
    session: Optional[Session] = Depends(get_session),
    store: SupabaseClient = Depends(get_supabase_client),
):
    state = await check_admin(session, store)
    return SessionDataResponse(
        user_email=session.user.email if session else None,
        is_admin=state.is_admin,
    )


@router.get("/dashboard/data", response_model=SessionDataResponse)
async def dashboard_data(
    session: Optional[Session] = Depends(get_session),
    store: SupabaseClient = Depends(get_supabase_client),
):
    session = require_session(session)
    state = await check_admin(session, store)
    return SessionDataResponse(user_email=session.user.email, is_admin=state.is_admin)


def _join_users(users: List[dict], payments: List[dict], admin_email: Optional[str]) -> List[AdminUserRow]:
    """Attach each user's payment record; the admin's own account is hidden."""
    by_user = {p.get("user_id"): p for p in payments}
    rows = []
    for u in users:
        email = u.get("email")
        if not isinstance(email, str) or email == admin_email:
            continue
        payment = by_user.get(u.get("id"), {})
        rows.append(AdminUserRow(
            user_id=str(u.get("id")),
            email=email,
            plan=payment.get("plan") or "N/A",
            status=payment.get("status") or "inactive",
            amount=payment.get("amount") or 0,
            created_at=u.get("created_at"),
            last_sign_in_at=u.get("last_sign_in_at"),
        ))
    return rows


@router.get("/admin/data", response_model=AdminPageResponse)
async def admin_data(
    session: Optional[Session] = Depends(get_session),
    supabase: SupabaseClient = Depends(get_supabase_client),
):
    session = await require_admin(session, supabase)
    try:
        users = await supabase.list_users()
        payments = await supabase.list_payments()
    except UpstreamError as exc:
        return error_response(exc)
    return AdminPageResponse(
        users=_join_users(users, payments, session.user.email),
        admin_email=session.user.email,
    )


@router.post("/api/admin/delete-user")
async def delete_user(
    request: Request,
    session: Optional[Session] = Depends(get_session),
    supabase: SupabaseClient = Depends(get_supabase_client),
):
    """The body is read only after the admin check, so an unauthorized
    caller always gets 401 whatever it sends."""
    if session is None or not await is_admin_user(supabase, session.user.id):
        return JSONResponse(status_code=401, content={"message": "Unauthorized"})
    try:
        body = DeleteUserRequest.model_validate(await request.json())
    except ValueError:
        return JSONResponse(status_code=400, content={"message": "A userId is required"})

    # Payments reference the user, so they go first
    try:
        await supabase.delete_payments(body.user_id)
    except UpstreamError as exc:
        logger.error("Deleting payments for %s failed: %s", body.user_id, exc)
        return JSONResponse(status_code=500, content={"message": "Failed to delete payment records"})
    try:
        await supabase.delete_user(body.user_id)
    except UpstreamError as exc:
        logger.error("Deleting user %s failed: %s", body.user_id, exc)
        return JSONResponse(status_code=500, content={"message": "Failed to delete user"})

    logger.info("Admin %s deleted user %s", session.user.id, body.user_id)
    return {"success": True}
