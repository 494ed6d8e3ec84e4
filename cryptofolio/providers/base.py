"""
Shared HTTP plumbing for every upstream provider.

Each call opens a short-lived ``httpx.AsyncClient``, sends exactly one
request and either returns the decoded JSON body or raises one of the
``UpstreamError`` subclasses.  There are no retries: a failed upstream call
is terminal for the request that triggered it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from cryptofolio import config
from cryptofolio.core.errors import UpstreamHttpError, UpstreamParseError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Upstream error bodies can be large HTML pages; keep log lines bounded.
_MAX_DETAIL_CHARS = 300


class UpstreamClient:
    """Base class for provider clients.

    ``transport`` is passed straight to ``httpx.AsyncClient`` so tests can
    plug in an ``httpx.MockTransport``.
    """

    provider: str = "upstream"

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout if timeout is not None else config.UPSTREAM_TIMEOUT_SECONDS
        self._transport = transport

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request and return the response if it is 2xx."""
        try:
            async with self._client() as client:
                resp = await client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s %s failed: %s", self.provider, method, _redact(url), exc)
            raise UpstreamHttpError(self.provider, None, str(exc) or type(exc).__name__) from exc

        if not resp.is_success:
            detail = resp.text[:_MAX_DETAIL_CHARS]
            logger.error(
                "%s %s %s -> HTTP %s", self.provider, method, _redact(url), resp.status_code,
            )
            raise UpstreamHttpError(self.provider, resp.status_code, detail)
        return resp

    async def _request_json(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> Any:
        resp = await self._send(method, url, headers=headers, **kwargs)
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamParseError(self.provider, "response body is not valid JSON") from exc

    def _parse(self, model: Type[M], payload: Any) -> M:
        """Validate ``payload`` against ``model`` at the provider boundary."""
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            errors = exc.errors()
            first = errors[0] if errors else {}
            loc = ".".join(str(p) for p in first.get("loc", ())) or "<root>"
            raise UpstreamParseError(
                self.provider,
                f"unexpected response shape at {loc}: {first.get('msg', 'invalid')}",
            ) from exc


def _redact(url: str) -> str:
    """Drop query strings and path secrets (Infura project ids) from URLs
    before they reach the logs."""
    parsed = httpx.URL(url)
    return f"{parsed.scheme}://{parsed.host}"
