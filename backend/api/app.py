"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI

from shared.config import Settings, get_settings
from shared.logging_config import configure_logging
from modules.billing import build_billing_gateway
from .routes import health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Builds the shared billing gateway on startup and releases its HTTP
    client and cache connection on shutdown.
    """
    # Startup
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)
    if getattr(app.state, "billing_gateway", None) is None:
        app.state.billing_gateway = build_billing_gateway(settings)
    logger.info(f"Starting {settings.app_name} on {settings.host}:{settings.port}")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")
    await app.state.billing_gateway.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the environment

    Returns:
        Configured FastAPI instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Subscription billing gateway",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.billing_gateway = None

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])

    return app


# Application instance for uvicorn
app = create_app()
