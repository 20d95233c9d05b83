"""Tests for environment-driven settings validation."""

import pytest
from pydantic import ValidationError

from app.core.config import REFERENCE_LANGUAGES, AppSettings, GreetingSettings


class TestGreetingSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GREETING_LOOKUP_LATENCY_MS", raising=False)
        monkeypatch.delenv("GREETING_ALL_LANGUAGES_LATENCY_MS", raising=False)

        cfg = GreetingSettings()

        assert cfg.default_language == "en"
        assert cfg.supported_languages == list(REFERENCE_LANGUAGES)
        assert cfg.lookup_latency_ms == 100
        assert cfg.all_languages_latency_ms == 50
        assert cfg.cache_ttl_seconds is None
        assert cfg.async_max_workers == 4

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GREETING_DEFAULT_LANGUAGE", "fr")
        monkeypatch.setenv("GREETING_SUPPORTED_LANGUAGES", '["fr", "de"]')
        monkeypatch.setenv("GREETING_CACHE_TTL_SECONDS", "30")

        cfg = GreetingSettings()

        assert cfg.default_language == "fr"
        assert cfg.supported_languages == ["fr", "de"]
        assert cfg.cache_ttl_seconds == 30

    def test_default_must_be_supported(self) -> None:
        with pytest.raises(ValidationError, match="default_language"):
            GreetingSettings(default_language="ja", supported_languages=["en", "es"])

    def test_default_without_greeting_rejected(self) -> None:
        with pytest.raises(ValidationError, match="has no greeting"):
            GreetingSettings(default_language="ko", supported_languages=["en", "ko"])

    def test_supported_code_without_greeting_allowed_when_default_is_known(self) -> None:
        cfg = GreetingSettings(default_language="en", supported_languages=["en", "ko"])

        assert cfg.supported_languages == ["en", "ko"]

    def test_too_many_languages_rejected(self) -> None:
        codes = ["en"] + [f"a{chr(ord('a') + i)}" for i in range(20)]

        with pytest.raises(ValidationError):
            GreetingSettings(default_language="en", supported_languages=codes)

    @pytest.mark.parametrize("code", ["EN", "eng", "e1", ""])
    def test_malformed_language_code_rejected(self, code: str) -> None:
        with pytest.raises(ValidationError):
            GreetingSettings(supported_languages=["en", code])

    def test_empty_language_list_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GreetingSettings(supported_languages=[])

    def test_worker_pool_bounds(self) -> None:
        with pytest.raises(ValidationError):
            GreetingSettings(async_max_workers=0)


class TestAppSettings:
    def test_rate_limit_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("APP_RATE_LIMIT_REQUESTS_PER_SECOND", raising=False)
        monkeypatch.delenv("APP_RATE_LIMIT_BURST", raising=False)

        cfg = AppSettings()

        assert cfg.rate_limit_requests_per_second == 100
        assert cfg.rate_limit_burst == 1
        assert cfg.rate_limit_include_headers is True

    @pytest.mark.parametrize("value", [0, 10001])
    def test_rate_out_of_range_rejected(self, value: int) -> None:
        with pytest.raises(ValidationError):
            AppSettings(rate_limit_requests_per_second=value)
