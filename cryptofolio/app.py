"""
Cryptofolio - FastAPI Application
Main entry point for the backend server.

Run with:
    uvicorn cryptofolio.app:app --reload --host 0.0.0.0 --port 8001
"""

import json
import logging
import time
import traceback
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response

from cryptofolio import __version__, config
from cryptofolio.api.routes import register_routes
from cryptofolio.cache_backend import get_cache_backend
from cryptofolio.core.errors import AuthorizationDenied, AuthSessionMissing
from cryptofolio.core.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan (startup / shutdown)
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Runs once on startup, yields for the lifetime of the app."""
    backend = get_cache_backend()
    logger.info("Cache backend: %s", backend.backend)
    if not config.SUPABASE_URL:
        logger.warning("SUPABASE_URL is not set; sessions cannot be checked for admin rights.")
    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Cryptofolio",
    version=__version__,
    description="Portfolio balances from Coinbase, Ethereum and CoinGecko",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(AuthSessionMissing)
async def session_missing_handler(request: Request, exc: AuthSessionMissing):
    return RedirectResponse(exc.redirect_to, status_code=303)


@app.exception_handler(AuthorizationDenied)
async def authorization_denied_handler(request: Request, exc: AuthorizationDenied):
    return RedirectResponse(exc.redirect_to, status_code=303)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exc()
    logger.error(
        "Unhandled exception on %s %s: %s\n%s",
        request.method, request.url.path, exc, tb,
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": str(exc),
            "type": type(exc).__name__,
            "path": request.url.path,
        },
    )


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def well_known_middleware(request: Request, call_next):
    """Browsers and extensions probe /.well-known/*; answer without routing."""
    if request.url.path.startswith("/.well-known/"):
        return Response(status_code=204)
    return await call_next(request)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """One structured ``request_log`` line per request, plus X-Request-ID.
    A request whose handler raises is logged with status 500."""
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    started = time.perf_counter()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
    finally:
        logger.info("request_log %s", json.dumps({
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": status,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        }))
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

register_routes(app)


# ---------------------------------------------------------------------------
# Development entry-point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cryptofolio.app:app",
        host="0.0.0.0",
        port=config.PORT,
        reload=True,
    )
