"""
Tests for the booking list caches.
"""

import json
import uuid
from unittest.mock import MagicMock, patch

import redis

from services.scheduling.services.cache import (
    InMemoryBookingCache,
    RedisBookingCache,
    booking_list_key,
    booking_list_keys,
    build_cache,
)


class FakeClock:
    def __init__(self):
        self.value = 1000.0

    def __call__(self):
        return self.value


class TestKeys:
    def test_booking_list_keys(self):
        user_id = uuid.UUID("12345678-1234-5678-1234-567812345678")
        assert booking_list_key(user_id, "upcoming") == (
            "bookings:12345678-1234-5678-1234-567812345678:upcoming"
        )
        assert [key.rsplit(":", 1)[1] for key in booking_list_keys(user_id)] == [
            "all",
            "upcoming",
            "past",
        ]


class TestInMemoryBookingCache:
    def setup_method(self):
        self.clock = FakeClock()
        self.cache = InMemoryBookingCache(clock=self.clock)

    def test_get_missing(self):
        assert self.cache.get("missing") is None

    def test_set_and_get(self):
        self.cache.set("key", [{"id": "1"}], 60)
        assert self.cache.get("key") == [{"id": "1"}]

    def test_empty_list_is_a_hit(self):
        self.cache.set("key", [], 60)
        assert self.cache.get("key") == []

    def test_entry_expires(self):
        self.cache.set("key", "value", 60)
        self.clock.value += 59
        assert self.cache.get("key") == "value"
        self.clock.value += 1
        assert self.cache.get("key") is None

    def test_invalidate(self):
        self.cache.set("key", "value", 60)
        self.cache.invalidate("key")
        self.cache.invalidate("never-set")
        assert self.cache.get("key") is None


class TestRedisBookingCache:
    def setup_method(self):
        self.client = MagicMock()
        self.cache = RedisBookingCache(self.client)

    def test_get_decodes_json(self):
        self.client.get.return_value = json.dumps([{"id": "1"}])
        assert self.cache.get("key") == [{"id": "1"}]
        self.client.get.assert_called_once_with("key")

    def test_get_miss(self):
        self.client.get.return_value = None
        assert self.cache.get("key") is None

    def test_get_undecodable_entry(self):
        self.client.get.return_value = "not json {"
        assert self.cache.get("key") is None

    def test_get_connection_error_is_a_miss(self):
        self.client.get.side_effect = redis.ConnectionError("down")
        assert self.cache.get("key") is None

    def test_set_uses_ttl(self):
        self.cache.set("key", {"a": 1}, 60)
        self.client.setex.assert_called_once_with("key", 60, json.dumps({"a": 1}))

    def test_set_connection_error_is_ignored(self):
        self.client.setex.side_effect = redis.ConnectionError("down")
        self.cache.set("key", {"a": 1}, 60)

    def test_invalidate(self):
        self.cache.invalidate("key")
        self.client.delete.assert_called_once_with("key")

    def test_invalidate_connection_error_is_ignored(self):
        self.client.delete.side_effect = redis.TimeoutError("slow")
        self.cache.invalidate("key")


class TestBuildCache:
    def test_without_url(self):
        assert isinstance(build_cache(None), InMemoryBookingCache)

    def test_with_url(self):
        with patch.object(redis.Redis, "from_url") as from_url:
            cache = build_cache("redis://localhost:6379/0")

        assert isinstance(cache, RedisBookingCache)
        from_url.assert_called_once()
        assert from_url.call_args.args[0] == "redis://localhost:6379/0"
