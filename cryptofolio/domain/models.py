"""
cryptofolio.domain.models: canonical Pydantic / dataclass models.

These are the single source of truth for data flowing between provider
clients, the session gate and the HTTP layer.

Import pattern::

    from cryptofolio.domain.models import NormalizedBalance, Session, AdminState
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Balances
# ---------------------------------------------------------------------------

class NormalizedBalance(BaseModel):
    """
    One holding, converted to human-readable decimal units regardless of
    the provider it came from.  Serialized with the camelCase ``usdValue``
    key the front end expects.
    """
    model_config = ConfigDict(populate_by_name=True)

    symbol: str
    balance: float = Field(ge=0)
    usd_value: Optional[float] = Field(default=None, alias="usdValue")
    network: str

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# Session (parsed from the Supabase session cookie)
# ---------------------------------------------------------------------------

@dataclass
class SessionUser:
    id: str
    email: Optional[str] = None


@dataclass
class Session:
    """
    The subset of a Supabase session this service relies on.  Owned by the
    auth provider; we only read it.
    """
    user: SessionUser
    access_token: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> Optional["Session"]:
        """Build a session from the cookie JSON.  Returns None when the
        payload has no usable user id."""
        if not isinstance(d, dict):
            return None
        user = d.get("user")
        if not isinstance(user, dict) or not user.get("id"):
            return None
        return cls(
            user=SessionUser(id=str(user["id"]), email=user.get("email")),
            access_token=d.get("access_token"),
        )


# ---------------------------------------------------------------------------
# Admin gate result
# ---------------------------------------------------------------------------

@dataclass
class AdminState:
    """
    Outcome of the admin gate for one page load.  Starts false/false and is
    set once when the gate runs; a new instance is built on the next load.
    """
    is_admin: bool = False
    checked_status: bool = False
