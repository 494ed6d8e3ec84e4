"""
Price Endpoints
GET /api/solana-price  - current SOL/USD from CoinGecko
"""

from fastapi import APIRouter, Depends

from cryptofolio.api.responses import error_response
from cryptofolio.api.schemas import PriceResponse
from cryptofolio.core.errors import UpstreamError
from cryptofolio.providers.coingecko import CoinGeckoClient, get_coingecko_client

router = APIRouter(prefix="/api", tags=["prices"])


@router.get("/solana-price")
async def solana_price(client: CoinGeckoClient = Depends(get_coingecko_client)):
    try:
        price = await client.get_solana_price()
    except UpstreamError as exc:
        return error_response(exc, message="Failed to fetch Solana price")
    return PriceResponse(price=price)
