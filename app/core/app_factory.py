"""Application factory for FastAPI app.

Centralizes app construction (metadata, lifespan, middleware, handlers,
routers) to improve testability and separation of concerns compared to a
monolithic main.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncIterator

from fastapi import FastAPI

from app.api.routes import greeting_router, greeting_v2_router, health_router
from app.core.config import settings
from app.core.dependencies import get_async_dispatcher, shutdown_dependencies
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the greeting service and worker pool, release them on shutdown.

    Building at startup makes a bad greeting configuration fail the boot
    instead of every later request.
    """
    logger.info("app.startup", extra={"app_env": settings.app_env})
    get_async_dispatcher()
    try:
        yield
    finally:
        shutdown_dependencies()
        logger.info("app.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Greeting API",
        description=(
            "Multilingual greeting service. Returns a localized greeting for a "
            "two-letter language code, with global rate limiting, response "
            "caching and an asynchronous resolution endpoint."
        ),
        version="1.0.0",
        debug=settings.app.debug,
        lifespan=lifespan,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(greeting_router)
    app.include_router(greeting_v2_router)
    app.include_router(health_router)

    return app
