"""Greeting dictionary lookups with default-language fallback.

The dictionary is fixed when the resolver is built and shared read-only by
every request. Lookups simulate the latency of a backing store, which is what
makes the cache in front of the resolver worthwhile.
"""

from __future__ import annotations

import logging
import time
from types import MappingProxyType
from typing import Iterable, Mapping

logger = logging.getLogger(__name__)


REFERENCE_GREETINGS: Mapping[str, str] = MappingProxyType(
    {
        "en": "Hello World!",
        "es": "¡Hola Mundo!",
        "fr": "Bonjour le Monde!",
        "de": "Hallo Welt!",
        "it": "Ciao Mondo!",
        "pt": "Olá Mundo!",
        "ru": "Привет мир!",
        "ja": "こんにちは世界!",
        "zh": "你好世界!",
    }
)


def build_greeting_dictionary(supported_languages: Iterable[str]) -> Mapping[str, str]:
    """Restrict the reference greetings to the configured languages.

    Codes without a known greeting are skipped and logged.

    Args:
        supported_languages: Language codes to serve.

    Returns:
        Immutable mapping of language code to greeting text.
    """
    dictionary: dict[str, str] = {}
    for code in supported_languages:
        greeting = REFERENCE_GREETINGS.get(code.lower())
        if greeting is None:
            logger.warning("greeting.unknown_supported_language", extra={"language": code})
            continue
        dictionary[code.lower()] = greeting
    return MappingProxyType(dictionary)


class GreetingResolver:
    """Resolve language codes to greeting text.

    Attributes:
        default_language: Code whose greeting is returned for unsupported codes.
    """

    def __init__(
        self,
        greetings: Mapping[str, str] = REFERENCE_GREETINGS,
        *,
        default_language: str = "en",
        lookup_latency_seconds: float = 0.0,
        all_languages_latency_seconds: float = 0.0,
    ) -> None:
        """Initialize the resolver.

        Args:
            greetings: Language code to greeting mapping (copied, then frozen).
            default_language: Fallback language code.
            lookup_latency_seconds: Simulated latency of a single lookup.
            all_languages_latency_seconds: Simulated latency of a full listing.

        Raises:
            ValueError: If the default language has no greeting.
        """
        self._greetings: Mapping[str, str] = MappingProxyType(dict(greetings))
        self.default_language = default_language.lower()
        if self.default_language not in self._greetings:
            raise ValueError(
                f"default language '{default_language}' is not in the greeting dictionary"
            )
        self._lookup_latency = lookup_latency_seconds
        self._all_latency = all_languages_latency_seconds

    def is_supported(self, language: str) -> bool:
        return language.lower() in self._greetings

    def resolve(self, language: str) -> str:
        """Return the greeting for ``language``, or the default language's greeting.

        An unsupported code is not an error: the fallback is silent apart from
        an info log record.
        """
        logger.debug("greeting.resolve", extra={"language": language})
        self._simulate_latency(self._lookup_latency)

        normalized = language.lower()
        greeting = self._greetings.get(normalized)
        if greeting is None:
            logger.info(
                "greeting.fallback",
                extra={"language": normalized, "default_language": self.default_language},
            )
            return self._greetings[self.default_language]
        return greeting

    def resolve_all(self) -> Mapping[str, str]:
        """Return an immutable snapshot of the whole dictionary."""
        logger.debug("greeting.resolve_all", extra={"count": len(self._greetings)})
        self._simulate_latency(self._all_latency)
        return self._greetings

    @staticmethod
    def _simulate_latency(seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)
