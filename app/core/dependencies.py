"""Process-wide service instances exposed as FastAPI dependencies.

The greeting service (with its cache), the async dispatcher and the request
pipeline are built once, on first use, from ``settings``. Routes depend on
``get_request_pipeline`` so tests can swap the whole pipeline through
``app.dependency_overrides``. ``shutdown_dependencies`` runs at application
shutdown and releases the dispatcher's worker threads.
"""

from __future__ import annotations

import logging
import threading

from app.core.config import settings
from app.core.rate_limit import get_rate_limiter
from app.services.async_dispatcher import AsyncGreetingDispatcher
from app.services.greeting_service import GreetingService
from app.services.request_pipeline import RequestPipeline

logger = logging.getLogger(__name__)


_init_lock = threading.Lock()
_greeting_service: GreetingService | None = None
_dispatcher: AsyncGreetingDispatcher | None = None


def get_greeting_service() -> GreetingService:
    """Return the shared cached greeting service."""

    global _greeting_service
    with _init_lock:
        if _greeting_service is None:
            _greeting_service = GreetingService.from_settings(settings.greeting)
            logger.info(
                "greeting_service.initialized",
                extra={
                    "default_language": settings.greeting.default_language,
                    "supported_languages": list(settings.greeting.supported_languages),
                },
            )
        return _greeting_service


def get_async_dispatcher() -> AsyncGreetingDispatcher:
    """Return the shared async dispatcher bound to the greeting service."""

    global _dispatcher
    service = get_greeting_service()
    with _init_lock:
        if _dispatcher is None:
            _dispatcher = AsyncGreetingDispatcher(
                service,
                max_workers=settings.greeting.async_max_workers,
            )
        return _dispatcher


def get_request_pipeline() -> RequestPipeline:
    """FastAPI dependency returning the request pipeline.

    The pipeline itself is stateless; it is rebuilt per call around the shared
    limiter, service and dispatcher.
    """

    return RequestPipeline(
        rate_limiter=get_rate_limiter(),
        greeting_service=get_greeting_service(),
        dispatcher=get_async_dispatcher(),
    )


def shutdown_dependencies() -> None:
    """Release the worker pool and forget the shared instances."""

    global _greeting_service, _dispatcher
    with _init_lock:
        dispatcher = _dispatcher
        _dispatcher = None
        _greeting_service = None

    if dispatcher is not None:
        dispatcher.shutdown(wait=True)
