"""Tests for the in-memory TTL result cache."""

import pytest

from contribution_analyzer.adapters.result_cache import InMemoryResultCache


def test_set_then_get_within_ttl(clock):
    cache = InMemoryResultCache(default_ttl_seconds=300, clock=clock)
    cache.set(("foo", "bar", 30, 50), ("row",))

    clock.advance(299)

    assert cache.has(("foo", "bar", 30, 50))
    assert cache.get(("foo", "bar", 30, 50)) == ("row",)


def test_entry_never_served_past_ttl(clock):
    cache = InMemoryResultCache(default_ttl_seconds=300, clock=clock)
    cache.set("k", "v")

    clock.advance(300)

    assert cache.get("k") is None
    assert not cache.has("k")
    assert len(cache) == 0  # dropped lazily on read


def test_per_entry_ttl_overrides_default(clock):
    cache = InMemoryResultCache(default_ttl_seconds=300, clock=clock)
    cache.set("short", 1, ttl_seconds=5)
    cache.set("long", 2)

    clock.advance(10)

    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_falsy_values_are_cache_hits(clock):
    cache = InMemoryResultCache(clock=clock)
    cache.set("empty", ())
    assert cache.has("empty")
    assert cache.get("empty") == ()


def test_delete_and_clear(clock):
    cache = InMemoryResultCache(clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)

    cache.delete("a")
    assert cache.get("a") is None
    assert cache.get("b") == 2

    cache.clear()
    assert len(cache) == 0


def test_non_positive_ttl_is_not_stored(clock):
    cache = InMemoryResultCache(clock=clock)
    cache.set("k", 1, ttl_seconds=0)
    assert not cache.has("k")


def test_rejects_non_positive_default_ttl():
    with pytest.raises(ValueError):
        InMemoryResultCache(default_ttl_seconds=0)
