"""Rate limiter interfaces.

The request pipeline depends on this abstraction (not the concrete
implementation) so we can swap storage backends later (e.g., Redis) with
minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Tokens replenished per second.
        remaining: Whole tokens left after this decision.
        retry_after_seconds: Advisory wait until a token is available (None when allowed).
    """

    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: float | None


class AbstractRateLimiter(ABC):
    """Interface for process-wide admission control."""

    @abstractmethod
    def consume(self, *, cost: int = 1) -> RateLimitResult:
        """Consume rate limit budget without blocking.

        Args:
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    def try_acquire(self) -> bool:
        """Take a single token if one is available right now."""
        return self.consume().allowed
