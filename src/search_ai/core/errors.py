"""
Error Model

This module defines the exception hierarchy raised by the search pipeline and
the FastAPI exception handlers that translate it into HTTP responses.

Propagation Rules
-----------------
- Per-page fetch failures never surface here; they become "no content".
- Batch timeouts are raised as `BatchTimeoutError` inside the fetcher and
  absorbed there with a warning.
- Everything else propagates to the caller as exactly one `SearchAIError`
  subclass, chained (``raise ... from exc``) to the underlying cause.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger("searchai.errors")


# ---------------------------------------------------------------------
# Exception Hierarchy
# ---------------------------------------------------------------------

class SearchAIError(RuntimeError):
    """Base class for every error raised by the search pipeline."""


class InvalidInputError(SearchAIError, ValueError):
    """Raised when a caller passes an unusable argument."""


class EmptyInputError(InvalidInputError):
    """Raised for an empty query or empty content to ingest."""


class ConfigurationError(SearchAIError):
    """Raised when required configuration (such as the API key) is missing."""


class DimensionMismatchError(SearchAIError):
    """Raised when an embedding vector does not have the configured dimension."""


class UpstreamError(SearchAIError):
    """Raised when the search engine, browser, or an API call fails."""


class EmbeddingError(UpstreamError):
    """Raised when embedding generation fails."""


class CompletionError(UpstreamError):
    """Raised when the chat-completion call fails."""


class BatchTimeoutError(SearchAIError):
    """Raised when a fetch batch does not settle within its time bound."""


class NoResponseError(SearchAIError):
    """Raised when the completion model returns no text."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

_STATUS_BY_ERROR = (
    (InvalidInputError, status.HTTP_400_BAD_REQUEST, "invalid_input"),
    (ConfigurationError, status.HTTP_503_SERVICE_UNAVAILABLE, "not_configured"),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY, "upstream_failure"),
    (NoResponseError, status.HTTP_502_BAD_GATEWAY, "no_response"),
    (DimensionMismatchError, status.HTTP_502_BAD_GATEWAY, "dimension_mismatch"),
)


async def search_error_handler(
    request: Request,
    exc: SearchAIError,
) -> JSONResponse:
    """
    Translate a pipeline error into a machine-readable JSON response.

    Invalid input is reported with its message so the caller can correct
    it. Upstream failures report only their kind; the chained cause is
    logged, never returned.
    """
    for error_type, status_code, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status_code, code = status.HTTP_500_INTERNAL_SERVER_ERROR, "search_failed"

    if status_code >= 500:
        logger.error(
            "Search request failed: %s %s (%s)",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc_info=exc,
        )
        detail = "Search pipeline failed"
    else:
        detail = str(exc)

    payload: Dict[str, Any] = {"error": code, "detail": detail}
    return JSONResponse(status_code=status_code, content=payload)


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Logs the full stack trace and returns a generic 500 with no internal
    details.
    """
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=payload,
    )
