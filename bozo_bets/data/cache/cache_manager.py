"""
Caching layer for fetched odds and props.

Backends:
- Redis, shared between API workers
- In-memory, for a single process and for tests

Values are JSON documents with TTL-based expiration. Keys are namespaced
and are dropped when the data behind them changes.
"""
import asyncio
import json
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

import redis.asyncio as redis
from loguru import logger


class CacheBackend(ABC):
    """Abstract base class for cache backends."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Get a value from cache."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Set a value in cache with TTL."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a key from cache."""

    @abstractmethod
    async def get_ttl(self, key: str) -> Optional[int]:
        """Remaining TTL in seconds, -1 for no expiry, None if missing."""

    @abstractmethod
    async def close(self) -> None:
        """Release the backend."""


class InMemoryCache(CacheBackend):
    """
    Dict-backed cache living in the API process.

    Entries are dropped lazily when read after expiry, and the oldest
    tenth is evicted when ``max_size`` is reached.
    """

    def __init__(self, max_size: int = 1000):
        self._cache: dict[str, tuple[str, Optional[float]]] = {}
        self._max_size = max_size
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            payload, expiry_time = entry
            if expiry_time and time.time() > expiry_time:
                del self._cache[key]
                return None

            return json.loads(payload)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        payload = json.dumps(value, default=str)
        async with self._lock:
            if key not in self._cache and len(self._cache) >= self._max_size:
                self._evict_expired()
                if len(self._cache) >= self._max_size:
                    for old_key in list(self._cache)[: max(self._max_size // 10, 1)]:
                        del self._cache[old_key]

            expiry_time = time.time() + ttl_seconds if ttl_seconds > 0 else None
            self._cache[key] = (payload, expiry_time)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._cache.pop(key, None)

    async def get_ttl(self, key: str) -> Optional[int]:
        async with self._lock:
            if key not in self._cache:
                return None

            _, expiry_time = self._cache[key]
            if expiry_time is None:
                return -1
            return max(0, int(expiry_time - time.time()))

    async def close(self) -> None:
        async with self._lock:
            self._cache.clear()

    def _evict_expired(self) -> None:
        now = time.time()
        for key in [k for k, (_, exp) in self._cache.items() if exp and now > exp]:
            del self._cache[key]


class RedisCache(CacheBackend):
    """Redis-backed cache; the connection is opened on first use."""

    def __init__(self, redis_url: str = "redis://localhost:6379/0"):
        self.redis_url = redis_url
        self._redis: Optional[redis.Redis] = None
        self._lock = asyncio.Lock()

    async def _get_redis(self) -> redis.Redis:
        if self._redis is None:
            async with self._lock:
                if self._redis is None:
                    self._redis = redis.from_url(
                        self.redis_url, encoding="utf-8", decode_responses=True
                    )
        return self._redis

    async def get(self, key: str) -> Optional[Any]:
        client = await self._get_redis()
        payload = await client.get(key)
        if payload is None:
            return None
        return json.loads(payload)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        client = await self._get_redis()
        payload = json.dumps(value, default=str)
        if ttl_seconds > 0:
            await client.setex(key, ttl_seconds, payload)
        else:
            await client.set(key, payload)

    async def delete(self, key: str) -> None:
        client = await self._get_redis()
        await client.delete(key)

    async def get_ttl(self, key: str) -> Optional[int]:
        client = await self._get_redis()
        ttl = await client.ttl(key)
        if ttl == -2:
            return None
        return ttl

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


class CacheManager:
    """
    Namespaced cache with per-data-type default TTLs.

    Backend failures are logged and treated as misses so a cache outage
    never breaks a request.
    """

    DEFAULT_TTLS = {
        "props": 7 * 24 * 3600,  # one NFL week
        "odds": 300,
        "usage": 60,
        "default": 3600,
    }

    def __init__(self, backend: CacheBackend, key_prefix: str = "bozo_bets"):
        self.backend = backend
        self.key_prefix = key_prefix
        self.logger = logger.bind(component="cache")

    @classmethod
    def create_memory_cache(cls, max_size: int = 1000) -> "CacheManager":
        return cls(InMemoryCache(max_size=max_size))

    @classmethod
    def create_redis_cache(cls, redis_url: str) -> "CacheManager":
        return cls(RedisCache(redis_url=redis_url))

    @classmethod
    def create_from_settings(cls, settings) -> "CacheManager":
        """Redis when ``redis_url`` is configured, otherwise in-memory."""
        if settings.redis_url:
            return cls.create_redis_cache(settings.redis_url)
        return cls.create_memory_cache()

    def _make_key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    def _get_ttl(self, data_type: str, ttl_seconds: Optional[int] = None) -> int:
        if ttl_seconds is not None:
            return ttl_seconds
        return self.DEFAULT_TTLS.get(data_type, self.DEFAULT_TTLS["default"])

    async def get(self, key: str) -> Optional[Any]:
        try:
            value = await self.backend.get(self._make_key(key))
        except (redis.RedisError, OSError, ValueError) as e:
            self.logger.error(f"Cache get error for {key}: {e}")
            return None

        self.logger.debug(f"Cache {'hit' if value is not None else 'miss'}: {key}")
        return value

    async def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: Optional[int] = None,
        data_type: str = "default",
    ) -> None:
        ttl = self._get_ttl(data_type, ttl_seconds)
        try:
            await self.backend.set(self._make_key(key), value, ttl)
            self.logger.debug(f"Cache set: {key} (TTL: {ttl}s)")
        except (redis.RedisError, OSError, TypeError) as e:
            self.logger.error(f"Cache set error for {key}: {e}")

    async def delete(self, key: str) -> None:
        try:
            await self.backend.delete(self._make_key(key))
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Cache delete error for {key}: {e}")

    async def close(self) -> None:
        await self.backend.close()

    async def health_check(self) -> dict:
        test_key = self._make_key("_health_check")
        try:
            await self.backend.set(test_key, "ok", 60)
            value = await self.backend.get(test_key)
            await self.backend.delete(test_key)
        except (redis.RedisError, OSError) as e:
            return {
                "status": "unhealthy",
                "backend": type(self.backend).__name__,
                "error": str(e),
            }

        return {
            "status": "healthy" if value == "ok" else "degraded",
            "backend": type(self.backend).__name__,
        }
