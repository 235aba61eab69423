"""Cache service implementation.

This module provides an abstract cache service interface and an in-memory
implementation for memoizing query results (landmark, road and search
result lists) behind a string key with an absolute expiry.

Expiry is enforced two ways:
- Lazily on read: an entry whose ``expires_at`` has passed is a miss and is
  removed as part of the read, so callers never observe expired data.
- Actively by ``sweep_expired``: removes every expired entry whether or not
  it is read again. ``CacheSweeper`` runs it periodically.

Key construction is deterministic: two semantically equal queries always
build the same key. Bounds are rendered verbatim (no rounding), so nearly
identical viewports get distinct keys.
"""

import asyncio
import itertools
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from app.models import CacheEntry, CachePayload

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CacheService(ABC):
    """Abstract base class for cache services.

    Defines the interface for get, set, invalidation and sweeping, plus
    static builders for the query cache keys.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[CachePayload]:
        """Retrieve cached data by key.

        Args:
            key: The cache key to look up.

        Returns:
            The cached data if present and unexpired, None otherwise.
        """
        pass

    @abstractmethod
    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Like ``get`` but returns the whole entry."""
        pass

    @abstractmethod
    def set(
        self, key: str, data: CachePayload, expires_at: Optional[int] = None
    ) -> CacheEntry:
        """Store data under key, replacing any previous entry.

        Args:
            key: The cache key to store under.
            data: The result list to cache.
            expires_at: Absolute Unix timestamp in seconds. Defaults to
                now plus the service's default TTL.

        Returns:
            The stored entry, with a freshly assigned id.
        """
        pass

    @abstractmethod
    def invalidate(self, key: str) -> None:
        """Remove the entry for key. No-op if absent."""
        pass

    @abstractmethod
    def sweep_expired(self) -> int:
        """Remove all expired entries.

        Returns:
            Number of entries removed.
        """
        pass

    @abstractmethod
    def expires_at_from_now(self, ttl_seconds: Optional[int] = None) -> int:
        """Absolute expiry timestamp ``ttl_seconds`` from now."""
        pass

    @staticmethod
    def build_bounds_key(south: float, west: float, north: float, east: float) -> str:
        """Generate cache key for a bounding-box landmark query.

        Example:
            >>> CacheService.build_bounds_key(10.94, 106.82, 10.98, 106.88)
            'landmarks:10.94,106.82,10.98,106.88'
        """
        return f"landmarks:{south},{west},{north},{east}"

    @staticmethod
    def build_area_key(area: str) -> str:
        """Generate cache key for a road area query.

        Example:
            >>> CacheService.build_area_key("Buu Long")
            'roads:buu-long'
        """
        return "roads:" + "-".join(area.lower().split())

    @staticmethod
    def build_search_key(text: str) -> str:
        """Generate cache key for a free-text search.

        Example:
            >>> CacheService.build_search_key("  Dong Nai ")
            'search:dong nai'
        """
        return f"search:{text.strip().lower()}"


class MemoryCacheService(CacheService):
    """Process-local cache keyed by string with absolute expiry.

    Attributes:
        _entries: Live entries by key.
        _default_ttl: Default TTL in seconds for ``set`` without an expiry.
        _clock: Returns the current Unix time in seconds.
    """

    def __init__(self, default_ttl: int = 3600, clock: Clock = time.time) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._default_ttl = default_ttl
        self._clock = clock
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[CachePayload]:
        entry = self.get_entry(key)
        return entry.data if entry is not None else None

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            logger.debug(f"[CACHE] Expired on read: {key}")
            return None
        return entry

    def set(
        self, key: str, data: CachePayload, expires_at: Optional[int] = None
    ) -> CacheEntry:
        if expires_at is None:
            expires_at = self.expires_at_from_now()
        # model_construct keeps the caller's list object as-is
        entry = CacheEntry.model_construct(
            id=next(self._ids), key=key, data=data, expires_at=expires_at
        )
        self._entries[key] = entry
        return entry

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def sweep_expired(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def expires_at_from_now(self, ttl_seconds: Optional[int] = None) -> int:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        return int(self._clock()) + ttl


class CacheSweeper:
    """Background task calling ``sweep_expired`` on a fixed interval."""

    def __init__(self, cache: CacheService, interval_seconds: float = 300.0) -> None:
        self._cache = cache
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self.running:
            self._task = asyncio.create_task(self._run(), name="cache-sweeper")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                removed = self._cache.sweep_expired()
            except Exception:
                logger.exception("[CACHE] Sweep failed")
                continue
            if removed:
                logger.info(f"[CACHE] Swept {removed} expired entries")
