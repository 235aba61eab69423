"""Map Explorer Services.

Service layer components:
- Storage: in-memory landmark/road store with monotonic ids
- Cache: expiring result cache with lazy eviction and periodic sweep
- Fallback: ordered provider strategies with a fixture stage
- Wikipedia: geosearch and article search for landmarks
- OSM: Overpass (primary) + GeoJSON (secondary) road geometry
- Explorer: cache → store → providers orchestration per query
"""

from .cache import CacheService, CacheSweeper, MemoryCacheService
from .storage import MemoryStorageService, StorageService
from .fallback import ChainResult, FallbackChain, FetchStrategy, FixtureStrategy
from .wikipedia import WikipediaGeosearchStrategy, WikipediaSearchStrategy, WikipediaService
from .osm import (
    GeoJSONRoadService,
    GeoJSONRoadStrategy,
    OSMOverpassService,
    OverpassRoadStrategy,
    fixture_road_strategy,
)
from .explorer import MapExplorerService

__all__ = [
    # Cache
    "CacheService",
    "CacheSweeper",
    "MemoryCacheService",
    # Storage
    "MemoryStorageService",
    "StorageService",
    # Fallback chain
    "ChainResult",
    "FallbackChain",
    "FetchStrategy",
    "FixtureStrategy",
    # Providers
    "WikipediaGeosearchStrategy",
    "WikipediaSearchStrategy",
    "WikipediaService",
    "GeoJSONRoadService",
    "GeoJSONRoadStrategy",
    "OSMOverpassService",
    "OverpassRoadStrategy",
    "fixture_road_strategy",
    # Orchestration
    "MapExplorerService",
]
