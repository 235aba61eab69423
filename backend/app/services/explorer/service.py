"""Map explorer query orchestration.

Every query (landmarks in bounds, roads in an area, text search) follows
the same path:

1. Build a deterministic cache key from the query parameters.
2. Cache hit → return the cached list immediately.
3. Store lookup (bounds and area queries only) → a non-empty result is
   used as-is and no fetch happens.
4. Otherwise run the provider fallback chain and insert every returned
   record into the store.
5. Cache the result list for ``ttl_seconds``.
6. Return it.

Unexpected failures in steps 3-5 are logged and re-raised as
``ServiceError``; nothing is cached when that happens. Store inserts that
already happened are kept.
"""

import logging
from typing import Callable, Generic, Mapping, Optional, TypeVar

from pydantic import BaseModel

from app.models import (
    BoundingBox,
    Landmark,
    LandmarkCreate,
    Road,
    RoadCreate,
    SearchResult,
    ServiceError,
    UnknownAreaError,
)
from app.services.cache import CacheService
from app.services.fallback import FallbackChain
from app.services.osm import KNOWN_AREAS, Area
from app.services.storage import StorageService, normalize_area
from app.utils import InFlightRegistry

logger = logging.getLogger(__name__)

P = TypeVar("P")
Raw = TypeVar("Raw", bound=BaseModel)
Stored = TypeVar("Stored", bound=BaseModel)


class MapExplorerService:
    """Serves landmark, road and search queries through cache, store and providers.

    Args:
        storage: Entity store for landmarks and roads.
        cache: Expiring result cache.
        landmark_chain: Providers for landmarks in a bounding box.
        road_chain: Providers for roads in a known area.
        search_chain: Providers for free-text search.
        ttl_seconds: Lifetime of cached results.
        coalesce_requests: Share one in-flight miss path between concurrent
            identical queries. When off, concurrent identical misses each
            fetch and insert, and the last cache write wins.
        areas: Known road areas by normalized name.
    """

    def __init__(
        self,
        storage: StorageService,
        cache: CacheService,
        landmark_chain: FallbackChain[BoundingBox, LandmarkCreate],
        road_chain: FallbackChain[Area, RoadCreate],
        search_chain: FallbackChain[str, SearchResult],
        ttl_seconds: int = 3600,
        coalesce_requests: bool = True,
        areas: Optional[Mapping[str, Area]] = None,
    ) -> None:
        self._storage = storage
        self._cache = cache
        self._landmark_chain = landmark_chain
        self._road_chain = road_chain
        self._search_chain = search_chain
        self._ttl = ttl_seconds
        self._coalesce = coalesce_requests
        self._areas = areas if areas is not None else KNOWN_AREAS
        self._inflight = InFlightRegistry()

    async def query_landmarks_by_bounds(
        self, south: float, west: float, north: float, east: float
    ) -> list[Landmark]:
        """Landmarks for a map viewport."""
        key = CacheService.build_bounds_key(south, west, north, east)
        bbox = BoundingBox(south=south, west=west, north=north, east=east)
        return await self._query(
            key,
            _Plan(
                label="landmarks",
                params=bbox,
                chain=self._landmark_chain,
                stored=lambda: self._storage.landmarks_in_bounds(bbox.south_west, bbox.north_east),
                insert=self._storage.insert_landmark,
            ),
        )

    async def query_roads_by_area(self, area: str) -> list[Road]:
        """Roads for a named area.

        Raises:
            UnknownAreaError: If the area is not a known road area.
        """
        known = self._areas.get(normalize_area(area))
        if known is None:
            raise UnknownAreaError(area)
        key = CacheService.build_area_key(known.name)
        return await self._query(
            key,
            _Plan(
                label="roads",
                params=known,
                chain=self._road_chain,
                stored=lambda: self._storage.roads_in_area(known.name),
                insert=self._storage.insert_road,
            ),
        )

    async def query_landmarks_by_search(self, text: str) -> list[SearchResult]:
        """Free-text landmark search. Results are cached but never stored.

        Raises:
            ValueError: If ``text`` is blank.
        """
        if not text or not text.strip():
            raise ValueError("Search query is required")
        key = CacheService.build_search_key(text)
        return await self._query(
            key,
            _Plan(label="search", params=text.strip(), chain=self._search_chain),
        )

    def get_landmark(self, landmark_id: int) -> Optional[Landmark]:
        return self._storage.get_landmark(landmark_id)

    def stats(self) -> dict[str, int]:
        return {
            **self._storage.stats(),
            "cache_entries": len(self._cache),
            "in_flight": len(self._inflight),
        }

    async def _query(self, key: str, plan: "_Plan") -> list:
        cached = self._cache.get(key)
        if cached is not None:
            logger.info(f"[EXPLORER] Cache HIT for {key}")
            return cached

        logger.info(f"[EXPLORER] Cache MISS for {key}")
        if self._coalesce:
            return await self._inflight.run(key, lambda: self._load(key, plan))
        return await self._load(key, plan)

    async def _load(self, key: str, plan: "_Plan") -> list:
        try:
            records = plan.stored() if plan.stored is not None else []
            if records:
                logger.info(f"[EXPLORER] {len(records)} {plan.label} from store for {key}")
            else:
                result = await plan.chain.run(plan.params)
                if plan.insert is not None:
                    records = [plan.insert(record) for record in result.records]
                else:
                    records = list(result.records)
            self._cache.set(key, records, self._cache.expires_at_from_now(self._ttl))
        except Exception as e:
            logger.exception(f"[EXPLORER] Failed to load {plan.label} for {key}")
            raise ServiceError(f"Failed to fetch {plan.label}", cache_key=key) from e
        return records


class _Plan(Generic[P, Raw, Stored]):
    """How one query type reads the store, fetches and persists."""

    def __init__(
        self,
        label: str,
        params: P,
        chain: FallbackChain[P, Raw],
        stored: Optional[Callable[[], list[Stored]]] = None,
        insert: Optional[Callable[[Raw], Stored]] = None,
    ) -> None:
        self.label = label
        self.params = params
        self.chain = chain
        self.stored = stored
        self.insert = insert
