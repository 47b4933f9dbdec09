"""TTL 캐시 테스트."""

from __future__ import annotations

import pytest

from thereyet.core.cache import TTLCache


class _FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_get_returns_value_before_ttl() -> None:
    clock = _FakeClock(100.0)
    cache: TTLCache[str] = TTLCache(300, clock=clock)

    cache.set("GET:/search?q=sydney", "hit")
    clock.now = 399.9

    assert cache.get("GET:/search?q=sydney") == "hit"


def test_get_treats_entry_at_ttl_boundary_as_expired() -> None:
    clock = _FakeClock(0.0)
    cache: TTLCache[str] = TTLCache(300, clock=clock)

    cache.set("sig", "value")
    clock.now = 300.0

    assert cache.get("sig") is None


def test_get_missing_signature_returns_none() -> None:
    cache: TTLCache[str] = TTLCache(60)

    assert cache.get("unknown") is None


def test_set_overwrites_and_refreshes_timestamp() -> None:
    clock = _FakeClock(0.0)
    cache: TTLCache[str] = TTLCache(10, clock=clock)

    cache.set("sig", "old")
    clock.now = 8.0
    cache.set("sig", "new")
    clock.now = 15.0

    assert cache.get("sig") == "new"
    assert len(cache) == 1


def test_set_rejects_none_value() -> None:
    cache: TTLCache[object] = TTLCache(10)

    with pytest.raises(ValueError):
        cache.set("sig", None)


def test_expired_entries_are_purged_lazily() -> None:
    clock = _FakeClock(0.0)
    cache: TTLCache[int] = TTLCache(5, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    clock.now = 3.0
    cache.set("c", 3)
    clock.now = 6.0

    assert len(cache) == 3
    assert cache.purge_expired() == 2
    assert len(cache) == 1
    assert cache.get("c") == 3


def test_max_entries_evicts_oldest_first() -> None:
    clock = _FakeClock(0.0)
    cache: TTLCache[int] = TTLCache(100, max_entries=2, clock=clock)

    cache.set("a", 1)
    clock.now = 1.0
    cache.set("b", 2)
    clock.now = 2.0
    cache.set("c", 3)

    assert len(cache) == 2
    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_zero_ttl_never_returns_values() -> None:
    cache: TTLCache[str] = TTLCache(0, clock=_FakeClock(5.0))
    cache.set("sig", "value")

    assert cache.get("sig") is None


def test_clear_removes_everything() -> None:
    cache: TTLCache[int] = TTLCache(60)
    cache.set("a", 1)
    cache.clear()

    assert len(cache) == 0
    assert cache.get("a") is None
