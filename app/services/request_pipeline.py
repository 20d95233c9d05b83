"""Request admission and greeting resolution pipeline.

Every greeting request runs the same stages, in order:

1. Admission: the process-wide rate limiter accepts or rejects the request.
2. Validation: the raw language code is sanitized and format-checked.
3. Resolution: the cached greeting is looked up, either on the calling thread
   or on the async dispatcher's worker pool.
4. Success: the greeting is wrapped with its language metadata.

Each stage owns its failure class and stops the pipeline immediately. Nothing
is retried. Stages report rejections as ``Rejected`` values; the HTTP layer
turns them into responses via ``Rejected.to_error()``.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Union

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.core.errors import (
    AppError,
    RateLimitAppError,
    ResolutionAppError,
    ValidationAppError,
)
from app.core.rate_limit import hash_client_key
from app.services.async_dispatcher import AsyncGreetingDispatcher
from app.services.greeting_service import GreetingService
from app.utils.language_validators import sanitize_language_code

logger = logging.getLogger(__name__)


class RejectionKind(str, enum.Enum):
    """Failure classes a request can terminate with."""

    RATE_LIMITED = "rate_limited"
    INVALID_INPUT = "invalid_input"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class Success:
    """Successful outcome.

    Attributes:
        value: Greeting text, or the language mapping for a full listing.
        language: Sanitized language code (None for a full listing).
        is_supported: Whether the code is in the dictionary (False means fallback).
    """

    value: Any
    language: str | None = None
    is_supported: bool = True

    @property
    def character_count(self) -> int:
        return len(self.value) if isinstance(self.value, str) else 0


@dataclass(frozen=True)
class Rejected:
    """Rejected outcome.

    Attributes:
        kind: Failure class.
        message: Human-readable, client-safe message.
        retry_after_seconds: Advisory delay for RATE_LIMITED rejections.
        limit: Limiter refill rate, reported with RATE_LIMITED rejections.
    """

    kind: RejectionKind
    message: str
    retry_after_seconds: float | None = None
    limit: int | None = None

    def to_error(self) -> AppError:
        """Convert the rejection into the AppError rendered at the HTTP boundary."""

        if self.kind is RejectionKind.RATE_LIMITED:
            details: dict[str, Any] = {"retry_after": self.retry_after_seconds or 0.0}
            if self.limit is not None:
                details["limit"] = self.limit
                details["remaining"] = 0
            return RateLimitAppError(
                code="rate_limited",
                message=self.message,
                details=details,  # type: ignore[arg-type]
            )
        if self.kind is RejectionKind.INVALID_INPUT:
            return ValidationAppError(code="invalid_language_code", message=self.message)
        return ResolutionAppError(code="internal_error", message=self.message)


PipelineOutcome = Union[Success, Rejected]


class RequestPipeline:
    """Compose admission, validation and cached resolution per request.

    Attributes:
        rate_limiter: Process-wide admission gate.
        greeting_service: Cached greeting lookups (synchronous path).
        dispatcher: Worker pool used by the asynchronous path.
    """

    def __init__(
        self,
        *,
        rate_limiter: AbstractRateLimiter,
        greeting_service: GreetingService,
        dispatcher: AsyncGreetingDispatcher,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.greeting_service = greeting_service
        self.dispatcher = dispatcher

    def admit(self, client: str | None = None) -> Rejected | None:
        """Run the admission stage.

        Args:
            client: Client address, only used (hashed) for log correlation.

        Returns:
            A RATE_LIMITED rejection, or None when the request may proceed.
        """
        result = self.rate_limiter.consume()
        if result.allowed:
            return None

        logger.warning(
            "rate_limit.exceeded",
            extra={
                "client_hash": hash_client_key(client) if client else None,
                "limit": result.limit,
                "retry_after_s": result.retry_after_seconds,
            },
        )
        return Rejected(
            kind=RejectionKind.RATE_LIMITED,
            message="Rate limit exceeded. Please try again later.",
            retry_after_seconds=result.retry_after_seconds,
            limit=result.limit,
        )

    def _validate(self, raw_language: str | None) -> str | Rejected:
        try:
            return sanitize_language_code(raw_language)
        except ValidationAppError as exc:
            logger.info("pipeline.invalid_input", extra={"error_code": exc.code})
            return Rejected(kind=RejectionKind.INVALID_INPUT, message=exc.message)

    def _success(self, greeting: str, language: str) -> Success:
        return Success(
            value=greeting,
            language=language,
            is_supported=self.greeting_service.is_supported(language),
        )

    @staticmethod
    def _internal_error(language: str, exc: Exception) -> Rejected:
        logger.error(
            "pipeline.resolution_failed",
            extra={
                "language": language,
                "error_type": type(exc).__name__,
                "error_msg": str(exc),
            },
        )
        return Rejected(
            kind=RejectionKind.INTERNAL_ERROR,
            message="Error processing request",
        )

    def resolve_greeting(
        self, raw_language: str | None, *, client: str | None = None
    ) -> PipelineOutcome:
        """Synchronous path: resolve on the calling thread.

        Blocks the caller for the duration of a cache miss.
        """
        rejected = self.admit(client)
        if rejected is not None:
            return rejected

        language = self._validate(raw_language)
        if isinstance(language, Rejected):
            return language

        logger.info("pipeline.resolve", extra={"language": language, "mode": "sync"})
        try:
            greeting = self.greeting_service.get_greeting(language)
        except Exception as exc:
            return self._internal_error(language, exc)
        return self._success(greeting, language)

    async def resolve_greeting_async(
        self, raw_language: str | None, *, client: str | None = None
    ) -> PipelineOutcome:
        """Asynchronous path: resolve on the dispatcher's worker pool.

        Suspends only while awaiting the dispatcher future.
        """
        rejected = self.admit(client)
        if rejected is not None:
            return rejected

        language = self._validate(raw_language)
        if isinstance(language, Rejected):
            return language

        logger.info("pipeline.resolve", extra={"language": language, "mode": "async"})
        try:
            greeting = await asyncio.wrap_future(self.dispatcher.submit(language))
        except Exception as exc:
            return self._internal_error(language, exc)
        return self._success(greeting, language)

    def list_languages(self, *, client: str | None = None) -> PipelineOutcome:
        """Admission followed by the cached full listing (no validation stage)."""

        rejected = self.admit(client)
        if rejected is not None:
            return rejected

        try:
            languages: Mapping[str, str] = self.greeting_service.get_all_languages()
        except Exception as exc:
            return self._internal_error("*", exc)
        return Success(value=languages)
