"""
FastAPI application for the Mail Register dashboard.

PURPOSE: Application factory, error mapping and server runner.
AI CONTEXT: Creates app with all routes registered.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..__version__ import __version__
from ..config import Config
from ..storage import RecordStoreError
from .routes import router

__all__ = ["create_app", "run_dashboard"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:  # noqa: ARG001
    """
    Log dashboard startup and shutdown.

    Args:
        app: The FastAPI application instance (provided by FastAPI).

    Yields:
        None. Control returns to FastAPI to handle requests.
    """
    logger.info("Mail Register dashboard starting (v%s)", __version__)
    yield
    logger.info("Mail Register dashboard shutting down")


async def record_store_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Map an unreadable register to 503 Service Unavailable.

    Statistics are never served from a partial or stale register, so the
    request fails as a whole instead.
    """
    logger.error(f"Record store unavailable for {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"success": False, "message": "Record store unavailable", "error": str(exc)},
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI dashboard application.

    Business context: The dashboard is the office's statistics page. It
    serves the HTML page for people and a JSON API for scripts that
    enter records or pull counts.

    Returns:
        Configured FastAPI application instance with:
        - All dashboard routes registered (/, /partials/*, /charts/*, /api/*)
        - RecordStoreError mapped to HTTP 503
        - OpenAPI documentation available at /docs

    Example:
        >>> from fastapi.testclient import TestClient
        >>> client = TestClient(create_app())
        >>> client.get('/api/years').status_code
        200
    """
    app = FastAPI(
        title="Mail Register",
        description="Monthly statistics for the incoming and outgoing mail register",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router)
    app.add_exception_handler(RecordStoreError, record_store_error_handler)
    return app


def run_dashboard(
    host: str = Config.DEFAULT_HOST,
    port: int = Config.DEFAULT_PORT,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """
    Launch the Mail Register web dashboard server.

    Args:
        host: Network interface to bind. '127.0.0.1' keeps the register
            local; '0.0.0.0' exposes it to the office network.
        port: TCP port for the HTTP server.
        reload: Enable auto-reload on code changes for development.
        log_level: Uvicorn logging verbosity.

    Returns:
        None. Blocks until the server is stopped (Ctrl+C).

    Raises:
        OSError: If the port is already in use or host is invalid.
    """
    uvicorn.run(
        "mail_register.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


if __name__ == "__main__":
    run_dashboard()
