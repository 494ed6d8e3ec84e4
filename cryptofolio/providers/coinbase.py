"""
Coinbase REST client.

Two credential modes:
  • CDP API key (server-to-server): exchange and wallet account lists are
    fetched with a per-request JWT from ``coinbase_jwt``.
  • OAuth bearer token: used by the OAuth callback and by the
    ``/api/wallet-address/coinbase`` route.

Usage::

    client = CoinbaseClient()
    accounts = await client.fetch_exchange_accounts()
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, List, Optional

import httpx
from pydantic import ValidationError

from cryptofolio import config
from cryptofolio.core.constants import CB_OAUTH_ACCOUNTS_URL, CB_OAUTH_TOKEN_URL, CB_WALLET_PATH
from cryptofolio.core.errors import UpstreamParseError
from cryptofolio.domain.enums import Network
from cryptofolio.domain.models import NormalizedBalance
from cryptofolio.providers.base import UpstreamClient
from cryptofolio.providers.coinbase_jwt import CdpKey, load_cdp_key, make_jwt
from cryptofolio.providers.schemas import (
    ExchangeAccount,
    ExchangeAccountsResponse,
    OAuthTokenResponse,
    WalletAccount,
    WalletAccountsResponse,
)

logger = logging.getLogger(__name__)


class CoinbaseClient(UpstreamClient):
    provider = "coinbase"

    def __init__(
        self,
        key_loader: Callable[[], CdpKey] = load_cdp_key,
        host: Optional[str] = None,
        brokerage_path: Optional[str] = None,
        cb_version: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(timeout=timeout, transport=transport)
        self._key_loader = key_loader
        self._host = host or config.CB_API_HOST
        self._brokerage_path = brokerage_path or config.CB_BROKERAGE_PATH
        self._cb_version = cb_version or config.CB_VERSION

    # ------------------------------------------------------------------
    # CDP-key authenticated
    # ------------------------------------------------------------------

    def _signed_headers(self, api_path: str) -> dict:
        token = make_jwt(self._key_loader(), api_path, host=self._host)
        return {"Authorization": f"Bearer {token}"}

    async def fetch_exchange_accounts(self) -> List[ExchangeAccount]:
        """Advanced Trade (v3 brokerage) accounts, unfiltered."""
        headers = self._signed_headers(self._brokerage_path)
        headers["CB-VERSION"] = self._cb_version
        payload = await self._request_json(
            "GET", f"https://{self._host}{self._brokerage_path}", headers=headers,
        )
        return self._parse(ExchangeAccountsResponse, payload).accounts

    async def fetch_wallet_accounts(self) -> List[WalletAccount]:
        """Coinbase v2 wallet accounts, unfiltered.  A missing ``data``
        member is treated as no accounts."""
        payload = await self._request_json(
            "GET", f"https://{self._host}{CB_WALLET_PATH}",
            headers=self._signed_headers(CB_WALLET_PATH),
        )
        return self._parse(WalletAccountsResponse, payload).data

    # ------------------------------------------------------------------
    # OAuth
    # ------------------------------------------------------------------

    async def exchange_oauth_code(
        self,
        code: str,
        redirect_uri: str,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
    ) -> OAuthTokenResponse:
        """Trade an authorization code for access/refresh tokens."""
        auth = httpx.BasicAuth(
            client_id or config.COINBASE_CLIENT_ID,
            client_secret or config.COINBASE_CLIENT_SECRET,
        )
        payload = await self._request_json(
            "POST",
            CB_OAUTH_TOKEN_URL,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
            },
            auth=auth,
        )
        return self._parse(OAuthTokenResponse, payload)

    async def fetch_oauth_accounts(self, access_token: str) -> List[WalletAccount]:
        payload = await self._request_json(
            "GET", CB_OAUTH_ACCOUNTS_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        return self._parse(WalletAccountsResponse, payload).data

    async def fetch_normalized_balances(self, access_token: str) -> List[NormalizedBalance]:
        """OAuth account list mapped to ``NormalizedBalance`` (network
        ``coinbase``), one entry per account."""
        accounts = await self.fetch_oauth_accounts(access_token)
        try:
            return [to_normalized(acct) for acct in accounts]
        except ValidationError as exc:
            raise UpstreamParseError(self.provider, f"account cannot be normalized: {exc}") from exc


# ---------------------------------------------------------------------------
# Filters / mapping
# ---------------------------------------------------------------------------

def positive_exchange_accounts(accounts: List[ExchangeAccount]) -> List[ExchangeAccount]:
    return [a for a in accounts if a.available_balance.value > Decimal(0)]


def positive_wallet_accounts(accounts: List[WalletAccount]) -> List[WalletAccount]:
    return [a for a in accounts if a.balance.amount > Decimal(0)]


def to_normalized(account: WalletAccount) -> NormalizedBalance:
    usd_value = None
    if account.native_balance is not None:
        usd_value = float(account.native_balance.amount)
    return NormalizedBalance(
        symbol=account.balance.currency,
        balance=float(account.balance.amount),
        usd_value=usd_value,
        network=Network.COINBASE.value,
    )


def get_coinbase_client() -> CoinbaseClient:
    """FastAPI dependency."""
    return CoinbaseClient()
