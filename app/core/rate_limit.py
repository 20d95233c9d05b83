"""Process-wide rate limiter wiring.

This module owns the single admission gate shared by every endpoint.

Design goals:
- Minimal coupling: the request pipeline depends on the abstract limiter only.
- Swap-friendly: storage backend can be replaced (e.g., Redis) behind an
  abstract interface.
- One instance per process, built lazily from settings on first use.

Client addresses are resolved here too, but only for log correlation: the
limiter itself is global, not per client.
"""

from __future__ import annotations

import hashlib
import logging
import threading

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemoryTokenBucketRateLimiter
from app.core.config import settings

logger = logging.getLogger(__name__)


_init_lock = threading.Lock()
_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int] | None = None

# Proxy headers checked in order before falling back to the socket peer.
IP_HEADER_CANDIDATES: tuple[str, ...] = (
    "X-Forwarded-For",
    "X-Real-IP",
    "Proxy-Client-IP",
    "WL-Proxy-Client-IP",
    "HTTP_X_FORWARDED_FOR",
    "HTTP_X_FORWARDED",
    "HTTP_X_CLUSTER_CLIENT_IP",
    "HTTP_CLIENT_IP",
    "HTTP_FORWARDED_FOR",
    "HTTP_FORWARDED",
    "HTTP_VIA",
    "REMOTE_ADDR",
)


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_requests_per_second,
        settings.app.rate_limit_burst,
    )

    with _init_lock:
        if _limiter is None or _limiter_config != config:
            _limiter = InMemoryTokenBucketRateLimiter(
                requests_per_second=config[0],
                burst=config[1],
            )
            _limiter_config = config
            logger.info(
                "rate_limit.initialized",
                extra={
                    "requests_per_second": config[0],
                    "burst": config[1],
                },
            )

        return _limiter


def reset_rate_limiter() -> None:
    """Drop the cached limiter so the next call rebuilds a full bucket."""

    global _limiter, _limiter_config
    with _init_lock:
        _limiter = None
        _limiter_config = None


def get_client_ip(request: Request) -> str:
    """Resolve the originating client address for a request.

    Args:
        request: FastAPI request.

    Returns:
        str: First address found in the proxy headers, the socket peer, or "unknown".
    """

    for header in IP_HEADER_CANDIDATES:
        value = request.headers.get(header)
        if value and value.lower() != "unknown":
            return value.split(",")[0].strip()

    return request.client.host if request.client else "unknown"


def hash_client_key(key: str) -> str:
    """Hash a client identifier for logging without exposing it."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]
