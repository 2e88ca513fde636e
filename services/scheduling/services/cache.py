"""
Read-through cache for booking lists.

Values are JSON-serialisable structures. A cache failure never fails the
request: reads degrade to a miss and writes to a no-op.
"""

import json
import threading
import time
import uuid
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

import redis

from services.common.logging_config import get_logger

logger = get_logger(__name__)

BOOKING_LIST_KINDS = ("all", "upcoming", "past")


def booking_list_key(user_id: uuid.UUID | str, kind: str) -> str:
    return f"bookings:{user_id}:{kind}"


def booking_list_keys(user_id: uuid.UUID | str) -> list[str]:
    return [booking_list_key(user_id, kind) for kind in BOOKING_LIST_KINDS]


class BookingCache(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, ttl_seconds: int) -> None: ...

    def invalidate(self, key: str) -> None: ...


class InMemoryBookingCache:
    """Process-local cache used when Redis is not configured, and in tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl_seconds, value)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)


class RedisBookingCache:
    """Redis-backed cache; connection errors are logged and ignored."""

    def __init__(self, client: redis.Redis):
        self._redis = client

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisBookingCache":
        client = redis.Redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=5.0,
            socket_connect_timeout=5.0,
            retry_on_timeout=True,
        )
        return cls(client)

    def get(self, key: str) -> Optional[Any]:
        try:
            cached = self._redis.get(key)
        except redis.RedisError as e:
            logger.warning("Cache read failed", key=key, error=str(e))
            return None
        if cached is None:
            logger.debug("Cache miss", key=key)
            return None
        try:
            return json.loads(cached)
        except ValueError:
            logger.warning("Discarding undecodable cache entry", key=key)
            return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            self._redis.setex(key, ttl_seconds, json.dumps(value, default=str))
        except redis.RedisError as e:
            logger.warning("Cache write failed", key=key, error=str(e))

    def invalidate(self, key: str) -> None:
        try:
            self._redis.delete(key)
        except redis.RedisError as e:
            logger.warning("Cache invalidation failed", key=key, error=str(e))


def build_cache(redis_url: Optional[str]) -> BookingCache:
    if redis_url:
        logger.info("Using Redis booking cache")
        return RedisBookingCache.from_url(redis_url)
    logger.info("REDIS_URL not set, using in-memory booking cache")
    return InMemoryBookingCache()
