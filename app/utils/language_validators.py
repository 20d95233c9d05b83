"""Language code sanitization and format validation.

Query parameters arrive untrusted: markup and script fragments are stripped
before the format check so nothing of the raw value reaches the resolver or
the logs in an exploitable shape.
"""

from __future__ import annotations

import logging
import re

from app.core.errors import ValidationAppError

logger = logging.getLogger(__name__)

LANGUAGE_CODE_RE = re.compile(r"[a-z]{2}")

_SCRIPT_BLOCK_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_MARKUP_TAG_RE = re.compile(r"<[^>]*>")
_JAVASCRIPT_SCHEME_RE = re.compile(r"javascript:", re.IGNORECASE)
_UNSAFE_CHARS_RE = re.compile(r"[<>\"'%;&()+\\]")


def is_valid_language_code(value: str | None) -> bool:
    """Check that a value is exactly two lowercase ASCII letters."""

    if value is None or len(value) != 2:
        return False
    return LANGUAGE_CODE_RE.fullmatch(value) is not None


def _strip_markup(value: str) -> str:
    value = _SCRIPT_BLOCK_RE.sub("", value)
    value = _MARKUP_TAG_RE.sub("", value)
    value = _JAVASCRIPT_SCHEME_RE.sub("", value)
    return _UNSAFE_CHARS_RE.sub("", value)


def sanitize_language_code(raw: str | None) -> str:
    """Normalize a raw language code and reject malformed values.

    Steps, in order: trim whitespace, reject empty input, strip HTML-significant
    characters and markup, lowercase, then require exactly ``[a-z]{2}``.
    Dictionary membership is not checked here: ``"xx"`` is well-formed.

    Args:
        raw: Language code as received from the client.

    Returns:
        str: Sanitized two-letter code.

    Raises:
        ValidationAppError: If the value is empty or not a two-letter code
            after sanitization.

    Examples:
        >>> sanitize_language_code(" ES ")
        'es'
        >>> sanitize_language_code("<b>fr</b>")
        'fr'
    """
    trimmed = raw.strip() if raw is not None else ""
    if not trimmed:
        logger.warning("language_validation.empty")
        raise ValidationAppError(
            code="invalid_language_code",
            message="Language code cannot be blank",
        )

    sanitized = _strip_markup(trimmed).lower()

    if not is_valid_language_code(sanitized):
        logger.warning(
            "language_validation.invalid_format",
            extra={
                "raw_length": len(raw or ""),
                "sanitized_length": len(sanitized),
            },
        )
        raise ValidationAppError(
            code="invalid_language_code",
            message="Invalid language code format",
            details={"hint": "Language code must be exactly 2 letters, e.g. 'en'"},
        )

    return sanitized
