"""
Cryptofolio: logging configuration.

Call ``configure_logging()`` once at startup.  Besides the shared stdout
handler it installs ``SecretRedactionFilter`` on every root handler, so
configured credentials (Infura project id, Coinbase OAuth token and client
secret, Supabase service-role key) never reach a log line even when an
upstream error echoes them back.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Iterable, List, Optional

from cryptofolio import config

_CONFIGURED = False

REDACTED = "***"

# Shorter values would mask ordinary words in messages
_MIN_SECRET_LEN = 8


class SecretRedactionFilter(logging.Filter):
    """Replace known secret values in the formatted message."""

    def __init__(self, secrets: Iterable[str]) -> None:
        super().__init__()
        self._secrets = sorted(
            {s for s in secrets if s and len(s) >= _MIN_SECRET_LEN}, key=len, reverse=True,
        )

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        redacted = message
        for secret in self._secrets:
            redacted = redacted.replace(secret, REDACTED)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def configured_secrets() -> List[str]:
    """Credential values from ``cryptofolio.config`` that must not be logged."""
    secrets = [
        config.COINBASE_CLIENT_SECRET,
        config.COINBASE_OAUTH_TOKEN,
        config.SUPABASE_SERVICE_ROLE_KEY,
    ]
    # Infura carries the project id as the last path segment
    if config.INFURA_URL:
        secrets.append(config.INFURA_URL.rstrip("/").rsplit("/", 1)[-1])
    return [s for s in secrets if s]


def configure_logging(
    level: Optional[str] = None,
    fmt: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt: str = "%Y-%m-%d %H:%M:%S",
) -> None:
    """Configure the root logger exactly once.

    ``level`` falls back to the ``LOG_LEVEL`` environment variable, then
    ``INFO``.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root = logging.getLogger()
    root.setLevel(resolved)

    # uvicorn may already have installed its own handlers
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        root.addHandler(handler)

    redaction = SecretRedactionFilter(configured_secrets())
    for handler in root.handlers:
        handler.addFilter(redaction)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _CONFIGURED = True
