"""
Cryptofolio: API request/response schemas (Pydantic).

Request bodies are validated here; responses that have a fixed shape are
declared so they show up in the OpenAPI docs.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class VerifyRequest(BaseModel):
    token: str = Field(min_length=1)
    type: str = "magiclink"


class SetSessionRequest(BaseModel):
    session: Optional[Dict[str, Any]] = None


class DeleteUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class PriceResponse(BaseModel):
    price: float


class SessionDataResponse(BaseModel):
    """Root-layout / dashboard page data."""
    model_config = ConfigDict(populate_by_name=True)

    user_email: Optional[str] = Field(default=None, alias="userEmail")
    is_admin: bool = Field(default=False, alias="isAdmin")


class AdminUserRow(BaseModel):
    user_id: str
    email: str
    plan: str = "N/A"
    status: str = "inactive"
    amount: float = 0
    created_at: Optional[str] = None
    last_sign_in_at: Optional[str] = None


class AdminPageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    users: List[AdminUserRow] = Field(default_factory=list)
    admin_email: Optional[str] = Field(default=None, alias="adminEmail")


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    cache_backend: str
