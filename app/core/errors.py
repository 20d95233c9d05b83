"""Greeting API error taxonomy.

Every failure that reaches a client is an ``AppError`` subclass. The subclass
fixes the HTTP status; ``code`` is the stable identifier clients match on.

- ``ValidationAppError``: malformed language code (400).
- ``RateLimitAppError``: admission denied by the token bucket (429).
- ``ResolutionAppError``: greeting lookup failed on the server (500).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Optional structured context rendered under ``error.details``."""

    hint: str
    language: str
    limit: int
    remaining: int
    retry_after: float


@dataclass
class AppError(Exception):
    """Base error for greeting request failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Client-safe message.
        details: Optional structured details.
    """

    status_code: ClassVar[int] = 400

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when a language code fails sanitization."""

    status_code: ClassVar[int] = 400


class RateLimitAppError(AppError):
    """Raised when the admission gate rejects a request."""

    status_code: ClassVar[int] = 429

    @property
    def retry_after(self) -> float:
        return float((self.details or {}).get("retry_after") or 0.0)


class ResolutionAppError(AppError):
    """Raised when greeting resolution fails unexpectedly."""

    status_code: ClassVar[int] = 500
