"""Cached greeting lookups.

Composes the cache and the resolver explicitly: every lookup goes through
``SimpleCache.get_or_compute`` keyed by language code, and the full listing is
cached under ``ALL_LANGUAGES_KEY``.
"""

from __future__ import annotations

import logging
from typing import Mapping

from app.core.config import GreetingSettings
from app.services.greeting_resolver import GreetingResolver, build_greeting_dictionary
from app.utils.simple_cache import ALL_LANGUAGES_KEY, SimpleCache

logger = logging.getLogger(__name__)


class GreetingService:
    """Greeting lookups memoized per language code.

    Attributes:
        resolver: Dictionary-backed resolver used on cache misses.
        cache: Cache holding resolved greetings and the full listing.
    """

    def __init__(self, resolver: GreetingResolver, cache: SimpleCache) -> None:
        self.resolver = resolver
        self.cache = cache

    @classmethod
    def from_settings(cls, greeting_settings: GreetingSettings) -> "GreetingService":
        """Build the service, its resolver and its cache from configuration."""
        resolver = GreetingResolver(
            build_greeting_dictionary(greeting_settings.supported_languages),
            default_language=greeting_settings.default_language,
            lookup_latency_seconds=greeting_settings.lookup_latency_ms / 1000,
            all_languages_latency_seconds=greeting_settings.all_languages_latency_ms / 1000,
        )
        cache = SimpleCache(ttl_seconds=greeting_settings.cache_ttl_seconds)
        return cls(resolver=resolver, cache=cache)

    def get_greeting(self, language: str) -> str:
        normalized = language.lower()
        return self.cache.get_or_compute(
            normalized, lambda: self.resolver.resolve(normalized)
        )

    def get_all_languages(self) -> Mapping[str, str]:
        return self.cache.get_or_compute(ALL_LANGUAGES_KEY, self.resolver.resolve_all)

    def is_supported(self, language: str) -> bool:
        return self.resolver.is_supported(language)

    def evict_greeting(self, language: str) -> bool:
        """Drop the cached greeting for one language code."""
        return self.cache.evict(language.lower())

    def clear_cache(self) -> None:
        """Drop every cached greeting and the cached full listing."""
        self.cache.clear()
        logger.info("greeting.cache_cleared")
