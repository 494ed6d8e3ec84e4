"""
JSON error envelope shared by the aggregation routes.

Every provider failure collapses to ``{"error": message}`` with a single
status code; the error class is only visible in the logs.
"""

from __future__ import annotations

import logging

from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def error_response(exc: Exception, status_code: int = 500, message: str = "") -> JSONResponse:
    logger.error("%s: %s", type(exc).__name__, exc)
    return JSONResponse(status_code=status_code, content={"error": message or str(exc)})
