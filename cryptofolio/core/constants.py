"""
Cryptofolio: system-wide constants.

Upstream paths, OAuth scopes and unit conversions live here.
"""

# ---------------------------------------------------------------------------
# Coinbase
# ---------------------------------------------------------------------------

CB_WALLET_PATH: str = "/api/v2/accounts"
CB_OAUTH_ACCOUNTS_URL: str = "https://api.coinbase.com/v2/accounts"
CB_OAUTH_TOKEN_URL: str = "https://api.coinbase.com/oauth/token"
CB_OAUTH_SCOPE: str = "exchange:accounts:read offline_access"
CB_OAUTH_CALLBACK_PATH: str = "/api/cb/oauth2/callback"

# CDP JWTs are valid for two minutes
CDP_JWT_TTL_SECONDS: int = 120

# ---------------------------------------------------------------------------
# Ethereum
# ---------------------------------------------------------------------------

WEI_PER_ETH: int = 10 ** 18
ETH_SYMBOL: str = "ETH"

# ---------------------------------------------------------------------------
# CoinGecko
# ---------------------------------------------------------------------------

SOLANA_COINGECKO_ID: str = "solana"
DEFAULT_VS_CURRENCY: str = "usd"

# ---------------------------------------------------------------------------
# Supabase
# ---------------------------------------------------------------------------

ADMIN_USERS_TABLE: str = "admin_users"
USER_PAYMENTS_TABLE: str = "user_payments"
DEFAULT_OTP_TYPE: str = "magiclink"

# ---------------------------------------------------------------------------
# Page redirects
# ---------------------------------------------------------------------------

LOGIN_PATH: str = "/auth/login"
NON_ADMIN_LANDING_PATH: str = "/dashboard"

# ---------------------------------------------------------------------------
# Cache key prefixes
# ---------------------------------------------------------------------------

VERIFICATION_KEY_PREFIX: str = "verify:"
OAUTH_STATE_KEY_PREFIX: str = "cb_oauth_state:"
