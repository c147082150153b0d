"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and configures lifespan.

Dependencies: fastapi, portfolio_backend.api, portfolio_backend.observability, portfolio_backend.configs
System role: Application initialization and configuration
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portfolio_backend.api import api_router
from portfolio_backend.boundary.db import get_async_engine
from portfolio_backend.configs import get_settings
from portfolio_backend.observability.logger import configure_logging
from portfolio_backend.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Configures logging on startup and releases pooled database
    connections on shutdown. Model clients are created lazily on first use.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Application startup: environment={settings.environment}")

    yield

    logger.info("Application shutdown")
    await get_async_engine().dispose()


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Retrieval-augmented assistant and content index for a personal portfolio site",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Add observability middleware (added first = last to execute)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routes
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "portfolio_backend.main:app",
        host="localhost",
        port=8082,
        reload=True,
    )
