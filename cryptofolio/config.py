"""
Centralized configuration for the Cryptofolio backend.
All settings come from environment variables for 12-factor deployment.
"""

import os


def _env_bool(name: str, default: bool = False) -> bool:
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------
PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://localhost:5173").rstrip("/")

# ---------------------------------------------------------------------------
# Supabase (session provider + admin_users authorization store)
# ---------------------------------------------------------------------------
PUBLIC_SUPABASE_URL = os.environ.get("PUBLIC_SUPABASE_URL", "")
SUPABASE_URL = (os.environ.get("SUPABASE_URL", "") or PUBLIC_SUPABASE_URL).rstrip("/")
PUBLIC_SUPABASE_ANON_KEY = os.environ.get("PUBLIC_SUPABASE_ANON_KEY", "")
SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")

SESSION_COOKIE_NAME = os.environ.get("SESSION_COOKIE_NAME", "sb-session")
# Drops the Secure cookie attribute so plain-http localhost works.
DEV_MODE = _env_bool("DEV_MODE", False)

# ---------------------------------------------------------------------------
# Coinbase
# ---------------------------------------------------------------------------
COINBASE_AUTH_URL = os.environ.get("COINBASE_AUTH_URL", "https://login.coinbase.com/oauth2/auth")
COINBASE_CLIENT_ID = os.environ.get("COINBASE_CLIENT_ID", "")
COINBASE_CLIENT_SECRET = os.environ.get("COINBASE_CLIENT_SECRET", "")
COINBASE_REDIRECT_URI = os.environ.get(
    "COINBASE_REDIRECT_URI",
    f"{PUBLIC_BASE_URL}/api/cb/oauth2/callback",
)
# Long-lived OAuth token used by /api/wallet-address/coinbase
COINBASE_OAUTH_TOKEN = os.environ.get("COINBASE_OAUTH_TOKEN", "")

CB_API_HOST = os.environ.get("CB_API_HOST", "api.coinbase.com")
CB_BROKERAGE_PATH = os.environ.get("CB_BROKERAGE_PATH", "/api/v3/brokerage/accounts")
CB_VERSION = os.environ.get("CB_VERSION", "2025-01-01")

# CDP API key (JSON file holding a JWK, a PEM EC key or an Ed25519 seed)
CDP_KEY_FILE = os.environ.get("CDP_KEY_FILE", "cdp_api_key.json")
CDP_KEY_NAME = os.environ.get("CDP_KEY_NAME", "")

# ---------------------------------------------------------------------------
# Infura / CoinGecko
# ---------------------------------------------------------------------------
INFURA_URL = os.environ.get("INFURA_URL", "")
COINGECKO_BASE_URL = os.environ.get("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3").rstrip("/")
# When the simple-price payload lacks the requested coin, report 0 instead
# of failing the request.
COINGECKO_MISSING_PRICE_AS_ZERO = _env_bool("COINGECKO_MISSING_PRICE_AS_ZERO", False)

UPSTREAM_TIMEOUT_SECONDS = float(os.environ.get("UPSTREAM_TIMEOUT_SECONDS", "15"))

# ---------------------------------------------------------------------------
# Short-lived key/value storage
# ---------------------------------------------------------------------------
REDIS_URL = os.environ.get("REDIS_URL", "").strip()
VERIFICATION_CODE_TTL_SECONDS = int(os.environ.get("VERIFICATION_CODE_TTL_SECONDS", "600"))
OAUTH_STATE_TTL_SECONDS = int(os.environ.get("OAUTH_STATE_TTL_SECONDS", "600"))

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------
PORT = int(os.environ.get("PORT", "8001"))

# Starlette mirrors the request Origin when credentials=True + "*".
CORS_ORIGINS = [
    s.strip()
    for s in os.environ.get("CORS_ORIGINS", "*").split(",")
    if s.strip()
]
