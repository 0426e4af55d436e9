"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from networth.api.routers import (
    history_router,
    holdings_router,
    quotes_router,
    transfer_router,
    valuation_router,
)
from networth.app_context import AppContext
from networth.config.logging_config import setup_logging
from networth.config.settings import get_settings
from networth.core.exceptions import AppError, NotFoundError

logger = logging.getLogger(__name__)


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the API application.

    When no context is given, one is created from settings at startup and
    closed at shutdown; an injected context is started but left open for
    its owner to close.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        setup_logging()
        owned = context is None
        ctx = context or AppContext()
        app.state.context = ctx
        await ctx.start()
        logger.info("%s started", ctx.settings.app_name)
        yield
        # Shutdown
        if owned:
            await ctx.close()
        else:
            await ctx.stop()

    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Personal net-worth tracking with live equity quotes",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(holdings_router)
    app.include_router(valuation_router)
    app.include_router(quotes_router)
    app.include_router(history_router)
    app.include_router(transfer_router)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """Global handler for application errors."""
        status_code = 404 if isinstance(exc, NotFoundError) else 400
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.code, "message": exc.message},
        )

    @app.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """Health check endpoint."""
        ctx: AppContext = request.app.state.context
        return {
            "status": "healthy" if ctx.holdings.error is None else "degraded",
            "quotes": "running" if ctx.quote_cache.is_running else "stopped",
        }

    @app.get("/")
    def root() -> dict[str, str]:
        """Root endpoint with API info."""
        return {
            "app": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
        }

    return app


app = create_app()
