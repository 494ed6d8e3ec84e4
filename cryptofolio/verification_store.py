"""
Email → one-time code storage for the OTP verification step.

Entries live in the shared ``CacheBackend`` with a TTL, so "does not
persist" is a policy (memory backend, bounded lifetime) rather than an
accident of module state.  Concurrent writers to the same email race;
the last write wins.

Each entry is stored as ``"<expires_at>:<code>"`` so a code put back after
a failed attempt keeps its original deadline.
"""

from __future__ import annotations

import hmac
import logging
import time
from typing import Optional, Tuple

from cryptofolio import config
from cryptofolio.cache_backend import CacheBackend, get_cache_backend
from cryptofolio.core.constants import VERIFICATION_KEY_PREFIX

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _decode(raw: Optional[str]) -> Optional[Tuple[int, str]]:
    if raw is None:
        return None
    expires_at, sep, code = raw.partition(":")
    if not sep or not expires_at.isdigit():
        return None
    return int(expires_at), code


class VerificationStore:

    def __init__(self, backend: CacheBackend, ttl_seconds: Optional[int] = None) -> None:
        self._backend = backend
        self._ttl = ttl_seconds if ttl_seconds is not None else config.VERIFICATION_CODE_TTL_SECONDS

    def _key(self, email: str) -> str:
        return f"{VERIFICATION_KEY_PREFIX}{_normalize_email(email)}"

    def _put(self, email: str, code: str, expires_at: int) -> None:
        remaining = expires_at - int(time.time())
        if remaining > 0:
            self._backend.set(self._key(email), f"{expires_at}:{code}", ttl_seconds=remaining)

    def set(self, email: str, code: str) -> None:
        self._put(email, code, int(time.time()) + self._ttl)

    def get(self, email: str) -> Optional[str]:
        entry = _decode(self._backend.get(self._key(email)))
        return entry[1] if entry else None

    def pop(self, email: str) -> Optional[str]:
        entry = _decode(self._backend.pop(self._key(email)))
        return entry[1] if entry else None

    def delete(self, email: str) -> None:
        self._backend.delete(self._key(email))

    def verify(self, email: str, code: str) -> bool:
        """Consume the stored code if ``code`` matches it.

        The entry is taken with an atomic ``pop`` so two concurrent
        attempts cannot both redeem it.  A wrong code puts the entry back
        with its original deadline so the user can retry until it expires.
        """
        entry = _decode(self._backend.pop(self._key(email)))
        if entry is None:
            return False
        expires_at, stored = entry
        if not hmac.compare_digest(stored.encode("utf-8"), code.encode("utf-8")):
            logger.info("Verification code mismatch for %s", _normalize_email(email))
            self._put(email, stored, expires_at)
            return False
        return True


def get_verification_store() -> VerificationStore:
    """FastAPI dependency: a store over the process-wide cache backend."""
    return VerificationStore(get_cache_backend())
