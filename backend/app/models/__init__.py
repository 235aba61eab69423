"""Data models for the Map Explorer backend."""

from .core import (
    BoundingBox,
    CacheEntry,
    CachePayload,
    CamelModel,
    Coordinate,
    Landmark,
    LandmarkCreate,
    Road,
    RoadCreate,
    SearchResult,
)
from .errors import (
    AppError,
    ErrorCode,
    ErrorResponse,
    ServiceError,
    UnknownAreaError,
    UpstreamError,
)

__all__ = [
    "BoundingBox",
    "CacheEntry",
    "CachePayload",
    "CamelModel",
    "Coordinate",
    "Landmark",
    "LandmarkCreate",
    "Road",
    "RoadCreate",
    "SearchResult",
    "AppError",
    "ErrorCode",
    "ErrorResponse",
    "ServiceError",
    "UnknownAreaError",
    "UpstreamError",
]
