"""
Normalized balance Endpoints
GET /api/wallet-address/coinbase           - Coinbase accounts (OAuth token)
GET /api/wallet-address/infura?address=0x  - on-chain ETH balance
"""

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cryptofolio import config
from cryptofolio.api.responses import error_response
from cryptofolio.core.errors import UpstreamError
from cryptofolio.providers.coinbase import CoinbaseClient, get_coinbase_client
from cryptofolio.providers.infura import EthereumClient, get_ethereum_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/wallet-address", tags=["wallet-address"])

_ETH_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")


@router.get("/coinbase")
async def coinbase_balances(client: CoinbaseClient = Depends(get_coinbase_client)):
    if not config.COINBASE_OAUTH_TOKEN:
        return JSONResponse(status_code=500, content={"error": "COINBASE_OAUTH_TOKEN is not set"})
    try:
        balances = await client.fetch_normalized_balances(config.COINBASE_OAUTH_TOKEN)
    except UpstreamError as exc:
        return error_response(exc)
    return [b.to_json() for b in balances]


@router.get("/infura")
async def infura_balance(
    address: Optional[str] = None,
    client: EthereumClient = Depends(get_ethereum_client),
):
    if not address or not _ETH_ADDRESS.match(address):
        return JSONResponse(status_code=400, content={"error": "A valid 0x-prefixed Ethereum address is required"})
    try:
        balance = await client.get_balance(address)
    except UpstreamError as exc:
        return error_response(exc)
    return [balance.to_json()]
