"""In-memory token bucket rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: refill, check and decrement happen under a single lock.
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


class InMemoryTokenBucketRateLimiter(AbstractRateLimiter):
    """Global token bucket shared by every request.

    Tokens are replenished continuously at ``requests_per_second`` and the
    bucket never holds more than ``burst`` tokens. Decisions are immediate:
    a request that finds no token is rejected, it never waits in a queue.

    The bucket starts full, so the first ``burst`` calls are always admitted.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limit.
    """

    def __init__(
        self,
        *,
        requests_per_second: int,
        burst: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the token bucket.

        Args:
            requests_per_second: Refill rate in tokens per second.
            burst: Bucket capacity (maximum tokens available at once).
            clock: Monotonic time source returning seconds.

        Raises:
            ValueError: If requests_per_second or burst are invalid.
        """
        if requests_per_second < 1:
            raise ValueError("requests_per_second must be >= 1")
        if burst < 1:
            raise ValueError("burst must be >= 1")

        self._rate = requests_per_second
        self._capacity = burst
        self._clock = clock
        self._lock = threading.Lock()
        self._tokens = float(burst)
        self._last_refill = clock()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"InMemoryTokenBucketRateLimiter(requests_per_second={self._rate}, "
            f"burst={self._capacity})"
        )

    @property
    def requests_per_second(self) -> int:
        return self._rate

    @property
    def burst(self) -> int:
        return self._capacity

    def _refill_locked(self, now: float) -> None:
        elapsed = now - self._last_refill
        if elapsed > 0:
            self._tokens = min(self._capacity, self._tokens + elapsed * self._rate)
        # A clock that moves backwards must not mint tokens later on.
        self._last_refill = max(self._last_refill, now)

    def consume(self, *, cost: int = 1) -> RateLimitResult:
        """Take ``cost`` tokens if available, otherwise reject immediately.

        Args:
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult with the decision and an advisory retry delay.

        Raises:
            ValueError: If cost is below 1 or larger than the bucket capacity.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if cost > self._capacity:
            raise ValueError("cost must not exceed burst capacity")

        with self._lock:
            self._refill_locked(self._clock())

            if self._tokens >= cost:
                self._tokens -= cost
                return RateLimitResult(
                    allowed=True,
                    limit=self._rate,
                    remaining=int(self._tokens),
                    retry_after_seconds=None,
                )

            deficit = cost - self._tokens
            return RateLimitResult(
                allowed=False,
                limit=self._rate,
                remaining=0,
                retry_after_seconds=deficit / self._rate,
            )
