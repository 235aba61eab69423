"""OpenStreetMap road sources, known areas and fixture roads."""

from .fixtures import BUU_LONG, BUU_LONG_ROADS, KNOWN_AREAS, Area
from .service import (
    GeoJSONRoadService,
    GeoJSONRoadStrategy,
    OSMOverpassService,
    OverpassRoadStrategy,
    fixture_road_strategy,
)

__all__ = [
    "Area",
    "BUU_LONG",
    "BUU_LONG_ROADS",
    "KNOWN_AREAS",
    "GeoJSONRoadService",
    "GeoJSONRoadStrategy",
    "OSMOverpassService",
    "OverpassRoadStrategy",
    "fixture_road_strategy",
]
