"""
Caching layer for fetched odds data.

Provides two cache backends:
- InMemoryCache: Fast, ephemeral cache for development and tests
- RedisCache: Shared cache across API workers
"""
from .cache_manager import (
    CacheBackend,
    CacheManager,
    InMemoryCache,
    RedisCache,
)

__all__ = [
    "CacheBackend",
    "CacheManager",
    "InMemoryCache",
    "RedisCache",
]
