"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment defaults are set before the application settings are imported:
simulated lookup latency is disabled and the global rate limiter is generous
enough that ordinary tests are never throttled.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

os.environ.setdefault("GREETING_LOOKUP_LATENCY_MS", "0")
os.environ.setdefault("GREETING_ALL_LANGUAGES_LATENCY_MS", "0")
os.environ.setdefault("APP_RATE_LIMIT_REQUESTS_PER_SECOND", "10000")
os.environ.setdefault("APP_RATE_LIMIT_BURST", "10000")

from typing import Iterator
from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.in_memory import InMemoryTokenBucketRateLimiter
from app.core.dependencies import shutdown_dependencies
from app.core.rate_limit import reset_rate_limiter
from app.services.async_dispatcher import AsyncGreetingDispatcher
from app.services.greeting_resolver import GreetingResolver
from app.services.greeting_service import GreetingService
from app.services.request_pipeline import RequestPipeline
from app.utils.simple_cache import SimpleCache


@pytest.fixture(autouse=True)
def reset_shared_state() -> Iterator[None]:
    """Give every test a fresh process-wide limiter, cache and worker pool."""
    yield
    shutdown_dependencies()
    reset_rate_limiter()


@pytest.fixture
def clock() -> Mock:
    """Deterministic monotonic clock for the token bucket."""
    return Mock(return_value=1000.0)


@pytest.fixture
def greeting_service() -> GreetingService:
    return GreetingService(resolver=GreetingResolver(), cache=SimpleCache())


@pytest.fixture
def dispatcher(greeting_service: GreetingService) -> Iterator[AsyncGreetingDispatcher]:
    dispatcher = AsyncGreetingDispatcher(greeting_service, max_workers=2)
    yield dispatcher
    dispatcher.shutdown(wait=True)


@pytest.fixture
def make_pipeline(clock: Mock, greeting_service: GreetingService, dispatcher: AsyncGreetingDispatcher):
    """Factory building a pipeline around a token bucket with a frozen clock."""

    def _make(*, requests_per_second: int = 100, burst: int = 100) -> RequestPipeline:
        limiter = InMemoryTokenBucketRateLimiter(
            requests_per_second=requests_per_second,
            burst=burst,
            clock=clock,
        )
        return RequestPipeline(
            rate_limiter=limiter,
            greeting_service=greeting_service,
            dispatcher=dispatcher,
        )

    return _make
