"""Bounded LRU cache with optional expiry."""

import pytest

from chinese_astro.cache import BoundedCache
from chinese_astro.settings import CachePolicy


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_lru_eviction():
    cache = BoundedCache(CachePolicy(max_entries=2))
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1  # a is now most recent
    cache.set("c", 3)
    assert "b" not in cache
    assert "a" in cache and "c" in cache
    assert len(cache) == 2


def test_expiry():
    clock = FakeClock()
    cache = BoundedCache(CachePolicy(max_entries=10, max_age_seconds=60), clock=clock)
    cache.set("k", "v")
    clock.now = 59
    assert cache.get("k") == "v"
    clock.now = 61
    assert cache.get("k") is None
    assert len(cache) == 0


def test_no_expiry_without_max_age():
    clock = FakeClock()
    cache = BoundedCache(CachePolicy(max_entries=10), clock=clock)
    cache.set("k", "v")
    clock.now = 1e9
    assert cache.get("k") == "v"


def test_hit_and_miss_counters():
    cache = BoundedCache(CachePolicy(max_entries=4))
    cache.get("missing")
    cache.set("x", 1)
    cache.get("x")
    stats = cache.stats()
    assert (stats["hits"], stats["misses"], stats["size"]) == (1, 1, 1)
    cache.clear()
    assert cache.stats() == {"size": 0, "max_entries": 4, "max_age_seconds": None, "hits": 0, "misses": 0}


def test_get_default():
    cache = BoundedCache(CachePolicy(max_entries=1))
    assert cache.get("nope", default="fallback") == "fallback"


@pytest.mark.parametrize("kwargs", [dict(max_entries=0), dict(max_entries=5, max_age_seconds=0)])
def test_policy_validation(kwargs):
    with pytest.raises(ValueError):
        CachePolicy(**kwargs)
