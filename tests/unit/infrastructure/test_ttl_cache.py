"""Unit tests for TTLCache."""

from core.infrastructure.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_value_is_fresh_until_ttl():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=300, clock=clock)
    cache.set("store_settings", {"email_notifications_enabled": "true"})

    clock.now += 299.9
    assert cache.get("store_settings") == {"email_notifications_enabled": "true"}
    assert "store_settings" in cache

    clock.now += 0.1
    assert cache.get("store_settings") is None
    assert "store_settings" not in cache


def test_stale_value_survives_expiry():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set("key", "value")

    clock.now += 60

    assert cache.get("key", "fallback") == "fallback"
    assert cache.get_stale("key") == "value"


def test_invalidate_one_or_all():
    cache = TTLCache()
    cache.set("a", 1)
    cache.set("b", 2)

    cache.invalidate("a")
    assert cache.get("a") is None
    assert cache.get("b") == 2

    cache.invalidate()
    assert cache.get_stale("b") is None
