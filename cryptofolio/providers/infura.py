"""
Ethereum balance lookup over Infura JSON-RPC.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

import httpx

from cryptofolio import config
from cryptofolio.core.constants import ETH_SYMBOL, WEI_PER_ETH
from cryptofolio.core.errors import UpstreamRpcError
from cryptofolio.domain.enums import Network
from cryptofolio.domain.models import NormalizedBalance
from cryptofolio.providers.base import UpstreamClient
from cryptofolio.providers.schemas import JsonRpcResponse

logger = logging.getLogger(__name__)


def wei_to_eth(wei: int) -> Decimal:
    """Shift a wei amount to decimal ETH (18 places)."""
    return Decimal(wei) / Decimal(WEI_PER_ETH)


class EthereumClient(UpstreamClient):
    provider = "infura"

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(timeout=timeout, transport=transport)
        self._rpc_url = rpc_url or config.INFURA_URL

    async def _call(self, method: str, params: list) -> str:
        body = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        payload = await self._request_json("POST", self._rpc_url, json=body)
        rpc = self._parse(JsonRpcResponse, payload)
        if rpc.error is not None:
            raise UpstreamRpcError(self.provider, rpc.error.code, rpc.error.message)
        if rpc.result is None:
            raise UpstreamRpcError(self.provider, None, f"{method} returned no result")
        return rpc.result

    async def get_balance_wei(self, address: str) -> int:
        result = await self._call("eth_getBalance", [address, "latest"])
        return int(result, 16)

    async def get_balance(self, address: str) -> NormalizedBalance:
        wei = await self.get_balance_wei(address)
        return NormalizedBalance(
            symbol=ETH_SYMBOL,
            balance=float(wei_to_eth(wei)),
            usd_value=None,
            network=Network.ETHEREUM.value,
        )


def get_ethereum_client() -> EthereumClient:
    """FastAPI dependency."""
    return EthereumClient()
