"""In-memory memoization cache for resolved greetings.

Entries live until they are explicitly evicted, unless a TTL is configured.
The interface stays small so it can be swapped for Redis later.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable

logger = logging.getLogger(__name__)


# Sentinel key for the "all languages" query; never a valid language code.
ALL_LANGUAGES_KEY = "__all_languages__"


@dataclass
class CacheItem:
    """Container for cached values with optional expiration metadata."""

    value: Any
    expires_at: float | None


class SimpleCache:
    """Thread-safe, in-memory cache with per-key compute serialization.

    ``get_or_compute`` holds a per-key lock while computing a missing value,
    so concurrent misses on the same key run ``compute`` once. Misses on
    different keys proceed in parallel.

    Attributes:
        ttl_seconds: Optional time-to-live applied to all entries (None = never expire).
    """

    def __init__(self, ttl_seconds: int | None = None) -> None:
        self._ttl = ttl_seconds
        self._store: dict[Hashable, CacheItem] = {}
        self._key_locks: dict[Hashable, threading.Lock] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"SimpleCache(ttl_seconds={self._ttl}, size={len(self._store)}, "
            f"hits={self._hits}, misses={self._misses}, evictions={self._evictions})"
        )

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return self._lookup_locked(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Return the cached value for ``key``, computing and storing it on a miss.

        Args:
            key: Cache key (language code or ALL_LANGUAGES_KEY).
            compute: Zero-argument callable producing the value.

        Returns:
            Cached or freshly computed value.

        Raises:
            Exception: Whatever ``compute`` raises; nothing is stored in that case.
        """

        with self._lock:
            item = self._lookup_locked(key)
            if item is not None:
                self._hits += 1
                logger.debug("cache.hit", extra={"cache_key": str(key)})
                return item.value
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            # Another thread may have filled the entry while we waited.
            with self._lock:
                item = self._lookup_locked(key)
                if item is not None:
                    self._hits += 1
                    return item.value
                self._misses += 1

            logger.debug("cache.miss", extra={"cache_key": str(key)})
            value = compute()

            with self._lock:
                expires_at = time.time() + self._ttl if self._ttl else None
                self._store[key] = CacheItem(value=value, expires_at=expires_at)
                logger.debug(
                    "cache.set",
                    extra={
                        "cache_key": str(key),
                        "size": len(self._store),
                        "ttl_s": self._ttl,
                    },
                )
            return value

    def evict(self, key: Hashable) -> bool:
        """Remove a single entry.

        Returns:
            True if an entry was removed.
        """

        with self._lock:
            removed = self._evict_single(key)
        logger.info("cache.evict", extra={"cache_key": str(key), "removed": removed})
        return removed

    def clear(self) -> None:
        """Remove all cached entries (including ALL_LANGUAGES_KEY) and reset counters."""

        with self._lock:
            self._store.clear()
            self._key_locks.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0
        logger.info("cache.clear")

    def stats(self) -> dict[str, int | float | None]:
        """Return lightweight cache metrics without exposing values."""

        with self._lock:
            return {
                "ttl_seconds": self._ttl,
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def _lookup_locked(self, key: Hashable) -> CacheItem | None:
        item = self._store.get(key)
        if item is None:
            return None
        if self._is_expired(item):
            self._evict_single(key)
            return None
        return item

    def _evict_single(self, key: Hashable) -> bool:
        if key in self._store:
            self._store.pop(key, None)
            self._evictions += 1
            return True
        return False

    def _is_expired(self, item: CacheItem) -> bool:
        return item.expires_at is not None and time.time() > item.expires_at
