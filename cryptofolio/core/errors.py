"""
Cryptofolio: exception hierarchy.

Provider clients raise ``UpstreamError`` subclasses; route handlers turn
them into a JSON ``{"error": ...}`` envelope.  The two auth errors carry the
page a browser should be sent to and are converted to 303 redirects by the
application's exception handlers.
"""

from __future__ import annotations

from typing import Optional

from cryptofolio.core.constants import LOGIN_PATH, NON_ADMIN_LANDING_PATH


class CryptofolioError(Exception):
    """Base class for all errors raised by this package."""


# ---------------------------------------------------------------------------
# Upstream providers
# ---------------------------------------------------------------------------

class UpstreamError(CryptofolioError):
    """A third-party API call failed."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class UpstreamHttpError(UpstreamError):
    """Non-2xx response, or the request never got a response at all.

    ``status_code`` is ``None`` for transport failures (DNS, connect,
    timeout).
    """

    def __init__(self, provider: str, status_code: Optional[int], detail: str = "") -> None:
        if status_code is None:
            message = f"request failed: {detail}"
        else:
            message = f"HTTP {status_code}"
            if detail:
                message = f"{message}: {detail}"
        super().__init__(provider, message)
        self.status_code = status_code
        self.detail = detail


class UpstreamParseError(UpstreamError):
    """The upstream body was not JSON or did not match the expected shape."""


class UpstreamRpcError(UpstreamError):
    """A JSON-RPC endpoint answered with an ``error`` member."""

    def __init__(self, provider: str, code: Optional[int], message: str) -> None:
        super().__init__(provider, f"RPC error {code}: {message}")
        self.code = code


class AuthProviderError(UpstreamError):
    """The auth provider rejected the request (bad OTP, expired token, …)."""


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------

class CoinbaseKeyError(CryptofolioError):
    """The CDP API key file is missing or in an unsupported format."""


# ---------------------------------------------------------------------------
# Session / authorization (control flow, not failures)
# ---------------------------------------------------------------------------

class AuthSessionMissing(CryptofolioError):
    """No session is attached to the request."""

    def __init__(self, redirect_to: str = LOGIN_PATH) -> None:
        super().__init__("no active session")
        self.redirect_to = redirect_to


class AuthorizationDenied(CryptofolioError):
    """A session exists but its user is not an administrator."""

    def __init__(self, user_id: Optional[str] = None, redirect_to: str = NON_ADMIN_LANDING_PATH) -> None:
        super().__init__(f"user {user_id} is not an administrator")
        self.user_id = user_id
        self.redirect_to = redirect_to
