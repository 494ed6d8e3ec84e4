"""
CoinGecko simple-price client.

A non-2xx response always raises.  What happens when the payload lacks the
requested coin is a policy: strict (raise ``UpstreamParseError``) unless
``COINGECKO_MISSING_PRICE_AS_ZERO`` asks for the legacy 0 fallback.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from cryptofolio import config
from cryptofolio.core.constants import DEFAULT_VS_CURRENCY, SOLANA_COINGECKO_ID
from cryptofolio.core.errors import UpstreamParseError
from cryptofolio.providers.base import UpstreamClient
from cryptofolio.providers.schemas import SimplePriceResponse

logger = logging.getLogger(__name__)


class CoinGeckoClient(UpstreamClient):
    provider = "coingecko"

    def __init__(
        self,
        base_url: Optional[str] = None,
        missing_as_zero: Optional[bool] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(timeout=timeout, transport=transport)
        self._base_url = (base_url or config.COINGECKO_BASE_URL).rstrip("/")
        self._missing_as_zero = (
            config.COINGECKO_MISSING_PRICE_AS_ZERO if missing_as_zero is None else missing_as_zero
        )

    async def get_price(self, coin_id: str, vs_currency: str = DEFAULT_VS_CURRENCY) -> float:
        payload = await self._request_json(
            "GET",
            f"{self._base_url}/simple/price",
            params={"ids": coin_id, "vs_currencies": vs_currency},
        )
        price = self._parse(SimplePriceResponse, payload).price(coin_id, vs_currency)
        if price is None:
            if self._missing_as_zero:
                logger.warning("CoinGecko returned no %s/%s price; reporting 0", coin_id, vs_currency)
                return 0.0
            raise UpstreamParseError(self.provider, f"no {vs_currency} price for {coin_id}")
        return price

    async def get_solana_price(self) -> float:
        return await self.get_price(SOLANA_COINGECKO_ID)


def get_coingecko_client() -> CoinGeckoClient:
    """FastAPI dependency."""
    return CoinGeckoClient()
