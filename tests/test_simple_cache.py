"""Unit tests for the in-memory SimpleCache."""

import threading
import time as real_time
from unittest.mock import Mock

import pytest

from app.utils import simple_cache
from app.utils.simple_cache import ALL_LANGUAGES_KEY, SimpleCache


class FakeTime:
    """Deterministic clock used to test expiration logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def time(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def test_second_call_is_a_hit() -> None:
    cache = SimpleCache()
    compute = Mock(return_value="Hello World!")

    assert cache.get_or_compute("en", compute) == "Hello World!"
    assert cache.get_or_compute("en", compute) == "Hello World!"

    compute.assert_called_once()
    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1


def test_keys_are_independent() -> None:
    cache = SimpleCache()
    compute_en = Mock(return_value="Hello World!")
    compute_es = Mock(return_value="¡Hola Mundo!")

    cache.get_or_compute("en", compute_en)
    cache.get_or_compute("es", compute_es)

    assert "en" in cache
    assert "es" in cache
    assert len(cache) == 2


def test_evict_forces_recompute() -> None:
    cache = SimpleCache()
    compute = Mock(side_effect=["first", "second"])

    assert cache.get_or_compute("fr", compute) == "first"
    assert cache.evict("fr") is True
    assert cache.get_or_compute("fr", compute) == "second"
    assert compute.call_count == 2


def test_evict_missing_key_returns_false() -> None:
    cache = SimpleCache()

    assert cache.evict("de") is False
    assert cache.stats()["evictions"] == 0


def test_clear_removes_every_key_including_sentinel() -> None:
    cache = SimpleCache()
    compute_en = Mock(return_value="Hello World!")
    compute_all = Mock(return_value={"en": "Hello World!"})

    cache.get_or_compute("en", compute_en)
    cache.get_or_compute(ALL_LANGUAGES_KEY, compute_all)

    cache.clear()

    stats = cache.stats()
    assert stats["entries"] == 0
    assert stats["hits"] == 0
    assert stats["misses"] == 0

    cache.get_or_compute("en", compute_en)
    cache.get_or_compute(ALL_LANGUAGES_KEY, compute_all)
    assert compute_en.call_count == 2
    assert compute_all.call_count == 2


def test_failed_compute_is_not_cached() -> None:
    cache = SimpleCache()
    compute = Mock(side_effect=[RuntimeError("backend down"), "recovered"])

    with pytest.raises(RuntimeError):
        cache.get_or_compute("it", compute)

    assert "it" not in cache
    assert cache.get_or_compute("it", compute) == "recovered"


def test_entries_never_expire_without_ttl(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_time = FakeTime()
    monkeypatch.setattr(simple_cache, "time", fake_time)

    cache = SimpleCache()
    compute = Mock(return_value="Hallo Welt!")
    cache.get_or_compute("de", compute)

    fake_time.advance(10 * 365 * 24 * 3600)

    assert cache.get_or_compute("de", compute) == "Hallo Welt!"
    compute.assert_called_once()


def test_expired_entry_is_recomputed_when_ttl_set(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_time = FakeTime()
    monkeypatch.setattr(simple_cache, "time", fake_time)

    cache = SimpleCache(ttl_seconds=5)
    compute = Mock(return_value="Ciao Mondo!")
    cache.get_or_compute("it", compute)

    fake_time.advance(6)

    cache.get_or_compute("it", compute)
    assert compute.call_count == 2
    assert cache.stats()["evictions"] == 1


def test_concurrent_misses_on_same_key_compute_once() -> None:
    cache = SimpleCache()
    calls = 0
    calls_lock = threading.Lock()

    def _slow_compute() -> str:
        nonlocal calls
        with calls_lock:
            calls += 1
        real_time.sleep(0.05)
        return "Olá Mundo!"

    results: list[str] = []

    def _reader() -> None:
        results.append(cache.get_or_compute("pt", _slow_compute))

    threads = [threading.Thread(target=_reader) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert calls == 1
    assert results == ["Olá Mundo!"] * 10


def test_thread_safety_under_concurrent_distinct_keys() -> None:
    cache = SimpleCache()
    total_keys = 50

    def _writer(idx: int) -> None:
        cache.get_or_compute(f"k-{idx}", lambda: {"v": idx})

    threads = [threading.Thread(target=_writer, args=(i,)) for i in range(total_keys)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert cache.stats()["entries"] == total_keys
    assert cache.get_or_compute("k-25", lambda: None) == {"v": 25}
