from aurora_gold.utils.ttl_cache import TTLCache

from conftest import FakeClock


def test_get_returns_fresh_value():
    cache = TTLCache(ttl_seconds=60, clock=FakeClock())
    cache.set("a", 1)
    assert cache.get("a") == 1
    assert "a" in cache


def test_expired_entry_is_removed_on_read():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=60, clock=clock)
    cache.set("a", 1)
    clock.advance(60)
    assert cache.get("a") is None
    assert len(cache) == 0


def test_oldest_entry_evicted_past_max():
    cache = TTLCache(ttl_seconds=60, max_entries=100, clock=FakeClock())
    for i in range(101):
        cache.set(f"key-{i}", i)

    assert len(cache) == 100
    assert cache.get("key-0") is None
    assert cache.get("key-1") == 1
    assert cache.get("key-100") == 100


def test_overwrite_keeps_original_position():
    cache = TTLCache(ttl_seconds=60, max_entries=2, clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 3)
    cache.set("c", 4)
    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 4
