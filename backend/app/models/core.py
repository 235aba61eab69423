"""Core data models for the Map Explorer backend.

This module contains the Pydantic models shared by the storage, cache and
provider layers: bounding boxes, landmarks, roads, search results and
cache entries.

Attributes are snake_case in Python; JSON uses camelCase aliases so the
client sees ``pageId``, ``roadType`` and ``expiresAt``.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# (latitude, longitude) in degrees
Coordinate = tuple[float, float]


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BoundingBox(BaseModel):
    """Rectangular query region given by its four edges."""

    south: float = Field(..., allow_inf_nan=False, description="Southern latitude")
    west: float = Field(..., allow_inf_nan=False, description="Western longitude")
    north: float = Field(..., allow_inf_nan=False, description="Northern latitude")
    east: float = Field(..., allow_inf_nan=False, description="Eastern longitude")

    @property
    def south_west(self) -> Coordinate:
        return (self.south, self.west)

    @property
    def north_east(self) -> Coordinate:
        return (self.north, self.east)

    @property
    def center(self) -> Coordinate:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)


class LandmarkCreate(CamelModel):
    """Landmark fields as produced by a provider, before an id is assigned."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    title: str = Field(..., description="Article title")
    page_id: int = Field(..., description="Wikipedia page id (not unique)")
    extract: str = Field(..., description="Descriptive text")
    thumbnail: Optional[str] = Field(None, description="Thumbnail image URL")
    coordinates: Coordinate = Field(..., description="(lat, lng) of the landmark")
    distance: Optional[str] = Field(
        None, description="Human-readable distance, e.g. '1.2 km away'"
    )
    url: str = Field(..., description="Article URL")


class Landmark(LandmarkCreate):
    """A stored landmark. Immutable once inserted."""

    id: int = Field(..., ge=1, description="Store-assigned identifier")


class RoadCreate(CamelModel):
    """Road fields as produced by a provider, before an id is assigned."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    name: Optional[str] = Field(None, description="Road name")
    coordinates: list[Coordinate] = Field(
        default_factory=list, description="Polyline points in drawing order"
    )
    area: str = Field(..., description="Grouping key, matched case-insensitively")
    road_type: Optional[str] = Field(None, description="OSM highway classification")
    osm_id: Optional[int] = Field(None, description="Source OSM way id")
    tags: Optional[dict[str, Any]] = Field(
        None, description="Source metadata passed through unmodified"
    )


class Road(RoadCreate):
    """A stored road. Immutable once inserted."""

    id: int = Field(..., ge=1, description="Store-assigned identifier")


class SearchResult(CamelModel):
    """A single free-text search hit."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    title: str
    page_id: int
    extract: str
    snippet: str = ""
    thumbnail: Optional[str] = None
    url: str


CachePayload = Union[list[Landmark], list[Road], list[SearchResult]]


class CacheEntry(CamelModel):
    """A memoized query result with an absolute expiry."""

    id: int = Field(..., ge=1, description="Per-write id, never used for lookup")
    key: str = Field(..., min_length=1, description="Unique lookup key")
    data: CachePayload = Field(..., description="Cached result list")
    expires_at: int = Field(..., description="Unix timestamp (seconds)")

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
