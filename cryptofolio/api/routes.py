"""
Cryptofolio: centralised router registration.

This module is the single place where every APIRouter is mounted onto the
FastAPI application.  Import and call ``register_routes(app)`` once in
``cryptofolio.app``.
"""

from __future__ import annotations

from fastapi import APIRouter, FastAPI

from cryptofolio import __version__
from cryptofolio.api.schemas import HealthResponse
from cryptofolio.cache_backend import get_cache_backend
from cryptofolio.routers import auth, coinbase, pages, prices, wallet_address

health_router = APIRouter(tags=["health"])


@health_router.get("/api/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(version=__version__, cache_backend=get_cache_backend().backend)


def register_routes(app: FastAPI) -> None:
    app.include_router(coinbase.router)
    app.include_router(wallet_address.router)
    app.include_router(prices.router)
    app.include_router(auth.router)
    app.include_router(pages.router)
    app.include_router(health_router)
