"""Off-thread greeting resolution on a bounded worker pool.

The async endpoint hands resolution to this dispatcher so the event loop never
blocks on the simulated lookup latency. Callers receive a
``concurrent.futures.Future`` immediately and await it with
``asyncio.wrap_future``.
"""

from __future__ import annotations

import contextvars
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from app.core.errors import ResolutionAppError
from app.services.greeting_service import GreetingService

logger = logging.getLogger(__name__)


class AsyncGreetingDispatcher:
    """Run cached greeting lookups on a dedicated thread pool.

    The pool is distinct from the server's request threads. A failing lookup
    completes its future with ``ResolutionAppError`` rather than the raw
    exception, so callers only ever see one failure type.
    """

    def __init__(
        self,
        service: GreetingService,
        *,
        max_workers: int = 4,
        thread_name_prefix: str = "greeting-async",
    ) -> None:
        """Initialize the dispatcher.

        Args:
            service: Cached greeting service executed on workers.
            max_workers: Upper bound on concurrently running lookups.
            thread_name_prefix: Worker thread name prefix (visible in logs).

        Raises:
            ValueError: If max_workers is below 1.
        """
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        self._service = service
        self._max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix,
        )

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def submit(self, language: str) -> "Future[str]":
        """Schedule a cached lookup and return its future without waiting.

        The lookup runs in a copy of the caller's context, so worker log
        records carry the submitting request's id.
        """

        logger.debug("dispatcher.submit", extra={"language": language})
        ctx = contextvars.copy_context()
        return self._executor.submit(ctx.run, self._resolve, language)

    def _resolve(self, language: str) -> str:
        logger.debug(
            "dispatcher.resolve",
            extra={"language": language, "worker": threading.current_thread().name},
        )
        try:
            return self._service.get_greeting(language)
        except Exception as exc:
            logger.error(
                "dispatcher.resolve_failed",
                extra={
                    "language": language,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise ResolutionAppError(
                code="internal_error",
                message="Error processing async request",
                details={"language": language},
            ) from exc

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work and release the worker threads."""

        self._executor.shutdown(wait=wait)
        logger.info("dispatcher.shutdown", extra={"wait": wait})
