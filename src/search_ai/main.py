"""
HTTP Application Entry Point

This module defines the FastAPI application instance, registers the routers
and the exception handlers, and provides a test-friendly application factory.

Design Goals
------------
- Explicit router registration
- Pipeline errors mapped to status codes in one place
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .core.errors import (
    SearchAIError,
    search_error_handler,
    unhandled_exception_handler,
)
from .api import health_routes, search_routes


logger = logging.getLogger("searchai.app")


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """
    Report configuration at startup without ever logging the full key.
    """
    logger.info("Starting search-ai (OpenAI key: %s)", settings.masked_api_key)
    if settings.openai_api_key is None:
        logger.warning("OPENAI_API_KEY is not set; /search requests will fail with 503")
    yield
    logger.info("Shutting down search-ai")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    app = FastAPI(
        title="search-ai",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=_lifespan,
    )

    # --------------------------------------------------------------
    # Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(SearchAIError, search_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(search_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
