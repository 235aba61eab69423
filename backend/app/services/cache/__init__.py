"""Expiring result cache."""

from .service import CacheService, CacheSweeper, MemoryCacheService

__all__ = [
    "CacheService",
    "CacheSweeper",
    "MemoryCacheService",
]
