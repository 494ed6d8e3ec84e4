"""
Pydantic schemas for upstream responses.

Only the fields this service reads are declared; everything else is kept
(``extra="allow"``) so routes that pass raw accounts through still return
the provider's full shape.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator

_HEX_QUANTITY = re.compile(r"^0x[0-9a-fA-F]+$")


# ---------------------------------------------------------------------------
# Coinbase
# ---------------------------------------------------------------------------

class _Passthrough(BaseModel):
    model_config = ConfigDict(extra="allow")


class ExchangeAmount(_Passthrough):
    """v3 brokerage money value: ``{"value": "1.5", "currency": "BTC"}``."""
    value: Decimal
    currency: str


class ExchangeAccount(_Passthrough):
    """Advanced Trade (v3 brokerage) account."""
    currency: str
    available_balance: ExchangeAmount


class ExchangeAccountsResponse(_Passthrough):
    accounts: List[ExchangeAccount]


class WalletAmount(_Passthrough):
    """v2 money value: ``{"amount": "0.25", "currency": "ETH"}``."""
    amount: Decimal
    currency: str


class WalletAccount(_Passthrough):
    """Coinbase v2 account (custodial wallet)."""
    balance: WalletAmount
    native_balance: Optional[WalletAmount] = None


class WalletAccountsResponse(_Passthrough):
    data: List[WalletAccount] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def _null_is_empty(cls, v):
        return [] if v is None else v


class OAuthTokenResponse(_Passthrough):
    access_token: str
    token_type: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    scope: Optional[str] = None


# ---------------------------------------------------------------------------
# Ethereum JSON-RPC
# ---------------------------------------------------------------------------

class JsonRpcErrorBody(BaseModel):
    code: Optional[int] = None
    message: str = ""


class JsonRpcResponse(BaseModel):
    jsonrpc: str = "2.0"
    id: Optional[Union[int, str]] = None
    result: Optional[str] = None
    error: Optional[JsonRpcErrorBody] = None

    @field_validator("result")
    @classmethod
    def _hex_quantity(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _HEX_QUANTITY.match(v):
            raise ValueError(f"expected hex quantity, got {v!r}")
        return v


# ---------------------------------------------------------------------------
# CoinGecko
# ---------------------------------------------------------------------------

class SimplePriceResponse(RootModel[Dict[str, Dict[str, Optional[float]]]]):
    """``{"solana": {"usd": 123.45}}``"""

    def price(self, coin_id: str, vs_currency: str) -> Optional[float]:
        return self.root.get(coin_id, {}).get(vs_currency)
