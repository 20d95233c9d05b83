"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

from app.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    set_request_id,
)


def _capture_logger(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_client_addresses():
    """Ensure raw client addresses never reach the log output."""

    logger, stream = _capture_logger("test_client_redaction")

    logger.info(
        "rate_limit.exceeded",
        extra={
            "client_ip": "203.0.113.7",
            "x-forwarded-for": "198.51.100.23, 10.0.0.1",
            "client_hash": "3f2a9c0d1e4b5a67",
        },
    )

    output = stream.getvalue()

    assert "203.0.113.7" not in output
    assert "198.51.100.23" not in output
    assert "[REDACTED]" in output
    assert "3f2a9c0d1e4b5a67" in output


def test_sensitive_filter_allows_safe_fields():
    """Verify safe fields pass through unmodified."""

    logger, stream = _capture_logger("test_safe_fields")

    logger.info(
        "http.request",
        extra={
            "request_id": "req-123",
            "path": "/api/v2/greeting",
            "status_code": 200,
            "duration_ms": 150.5,
        },
    )

    output = stream.getvalue()

    assert "req-123" in output
    assert "/api/v2/greeting" in output
    assert "200" in output
    assert "[REDACTED]" not in output


def test_sensitive_filter_redacts_nested_dicts():
    """Ensure nested sensitive fields are redacted."""

    logger, stream = _capture_logger("test_nested")

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "x-real-ip": "192.0.2.55",
                "user-agent": "pytest",
            },
            "safe_data": {
                "count": 5,
                "type": "test",
            },
        },
    )

    output = stream.getvalue()

    assert "192.0.2.55" not in output
    assert "[REDACTED]" in output
    assert "pytest" in output
    assert "test" in output


def test_json_formatter_keeps_non_ascii_greetings_readable():
    logger, stream = _capture_logger("test_unicode")

    logger.info("greeting.fallback", extra={"greeting": "こんにちは世界!"})

    output = stream.getvalue()
    assert "こんにちは世界!" in output
    assert json.loads(output)["greeting"] == "こんにちは世界!"


def test_request_id_attached_from_context():
    logger, stream = _capture_logger("test_request_id")

    set_request_id("ctx-789")
    try:
        logger.info("cache.miss")
    finally:
        clear_request_id()

    record = json.loads(stream.getvalue())
    assert record["request_id"] == "ctx-789"
    assert record["message"] == "cache.miss"
    assert record["level"] == "info"
