"""
Coinbase endpoints
GET  /api/cb/exchange/balances  - Advanced Trade accounts with funds available
GET  /api/cb/wallet/balances    - v2 wallet accounts with a positive balance
GET  /api/cb/oauth2/start       - redirect to the Coinbase consent screen
GET  /api/cb/oauth2/callback    - code exchange, hands balances to the opener
"""

import json
import logging
import uuid
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from cryptofolio import config
from cryptofolio.api.responses import error_response
from cryptofolio.cache_backend import CacheBackend, get_cache_backend
from cryptofolio.core.constants import CB_OAUTH_CALLBACK_PATH, CB_OAUTH_SCOPE, OAUTH_STATE_KEY_PREFIX
from cryptofolio.core.errors import CoinbaseKeyError, UpstreamError, UpstreamHttpError
from cryptofolio.providers.coinbase import (
    CoinbaseClient,
    get_coinbase_client,
    positive_exchange_accounts,
    positive_wallet_accounts,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cb", tags=["coinbase"])


# ---------------------------------------------------------------------------
# Balances (CDP key)
# ---------------------------------------------------------------------------

@router.get("/exchange/balances")
async def exchange_balances(client: CoinbaseClient = Depends(get_coinbase_client)):
    """Brokerage accounts whose ``available_balance.value`` is above zero."""
    try:
        accounts = await client.fetch_exchange_accounts()
    except (UpstreamError, CoinbaseKeyError) as exc:
        return error_response(exc)
    return [a.model_dump(mode="json") for a in positive_exchange_accounts(accounts)]


@router.get("/wallet/balances")
async def wallet_balances(client: CoinbaseClient = Depends(get_coinbase_client)):
    """Wallet accounts whose ``balance.amount`` is above zero."""
    try:
        accounts = await client.fetch_wallet_accounts()
    except (UpstreamError, CoinbaseKeyError) as exc:
        return error_response(exc)
    return [a.model_dump(mode="json") for a in positive_wallet_accounts(accounts)]


# ---------------------------------------------------------------------------
# OAuth
# ---------------------------------------------------------------------------

def build_authorize_url(state: str) -> str:
    params = {
        "response_type": "code",
        "client_id": config.COINBASE_CLIENT_ID,
        "redirect_uri": f"{config.PUBLIC_BASE_URL}{CB_OAUTH_CALLBACK_PATH}",
        "scope": CB_OAUTH_SCOPE,
        "state": state,
    }
    return f"{config.COINBASE_AUTH_URL}?{urlencode(params)}"


@router.get("/oauth2/start")
async def oauth_start(cache: CacheBackend = Depends(get_cache_backend)):
    """Redirect the user to Coinbase with a fresh, remembered ``state``."""
    if not config.COINBASE_CLIENT_ID:
        raise HTTPException(
            status_code=503,
            detail="Coinbase OAuth not configured. Set COINBASE_CLIENT_ID.",
        )
    state = str(uuid.uuid4())
    cache.set(f"{OAUTH_STATE_KEY_PREFIX}{state}", "1", ttl_seconds=config.OAUTH_STATE_TTL_SECONDS)
    return RedirectResponse(build_authorize_url(state), status_code=302)


def _opener_page(balances: list) -> str:
    # "</" inside the inline script would close the tag early
    payload = json.dumps({"type": "coinbase-oauth-success", "balances": balances})
    payload = payload.replace("</", "<\\/")
    return (
        "<!DOCTYPE html><body><script>"
        f"window.opener.postMessage({payload}, window.location.origin);"
        "window.close();"
        "</script></body>"
    )


@router.get("/oauth2/callback")
async def oauth_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    client: CoinbaseClient = Depends(get_coinbase_client),
    cache: CacheBackend = Depends(get_cache_backend),
):
    """Exchange the code, fetch accounts, and post them to the opener window."""
    if not code:
        return JSONResponse(status_code=400, content={"error": "Missing code"})
    if not state or cache.pop(f"{OAUTH_STATE_KEY_PREFIX}{state}") is None:
        logger.warning("Coinbase OAuth callback with unknown state")
        return JSONResponse(status_code=400, content={"error": "Invalid OAuth state"})

    try:
        tokens = await client.exchange_oauth_code(code, config.COINBASE_REDIRECT_URI)
        accounts = await client.fetch_oauth_accounts(tokens.access_token)
    except UpstreamHttpError as exc:
        return error_response(exc, status_code=exc.status_code or 502)
    except UpstreamError as exc:
        return error_response(exc, status_code=502)

    logger.info("Coinbase OAuth linked %d accounts", len(accounts))
    return HTMLResponse(_opener_page([a.model_dump(mode="json") for a in accounts]))
