"""Entity store for landmarks and roads.

Records live in process memory for the lifetime of the application and are
rebuilt from upstream providers after a restart. Ids are allocated from one
monotonic counter per entity kind and are never reused.

The store is a growing superset of everything fetched so far; the
time-boxed view of recent queries lives in the cache service instead.
"""

import itertools
from abc import ABC, abstractmethod
from typing import Optional

from app.models import Coordinate, Landmark, LandmarkCreate, Road, RoadCreate


def normalize_area(area: str) -> str:
    """Canonical form of an area name used for matching."""
    return " ".join(area.split()).lower()


class StorageService(ABC):
    """Abstract base class for landmark and road storage."""

    @abstractmethod
    def list_landmarks(self) -> list[Landmark]:
        pass

    @abstractmethod
    def landmarks_in_bounds(self, sw: Coordinate, ne: Coordinate) -> list[Landmark]:
        """Return landmarks inside the inclusive box spanned by ``sw`` and ``ne``."""
        pass

    @abstractmethod
    def insert_landmark(self, fields: LandmarkCreate) -> Landmark:
        pass

    @abstractmethod
    def get_landmark(self, landmark_id: int) -> Optional[Landmark]:
        pass

    @abstractmethod
    def list_roads(self) -> list[Road]:
        pass

    @abstractmethod
    def roads_in_area(self, area: str) -> list[Road]:
        """Return roads whose area matches ``area`` case-insensitively."""
        pass

    @abstractmethod
    def insert_road(self, fields: RoadCreate) -> Road:
        pass

    @abstractmethod
    def get_road(self, road_id: int) -> Optional[Road]:
        pass

    def stats(self) -> dict[str, int]:
        return {
            "landmarks": len(self.list_landmarks()),
            "roads": len(self.list_roads()),
        }


class MemoryStorageService(StorageService):
    """Dict-backed storage. Lookups by bounds or area are linear scans."""

    def __init__(self) -> None:
        self._landmarks: dict[int, Landmark] = {}
        self._roads: dict[int, Road] = {}
        self._landmark_ids = itertools.count(1)
        self._road_ids = itertools.count(1)

    # Landmarks

    def list_landmarks(self) -> list[Landmark]:
        return list(self._landmarks.values())

    def landmarks_in_bounds(self, sw: Coordinate, ne: Coordinate) -> list[Landmark]:
        sw_lat, sw_lng = sw
        ne_lat, ne_lng = ne
        return [
            landmark
            for landmark in self._landmarks.values()
            if sw_lat <= landmark.coordinates[0] <= ne_lat
            and sw_lng <= landmark.coordinates[1] <= ne_lng
        ]

    def insert_landmark(self, fields: LandmarkCreate) -> Landmark:
        landmark = Landmark(id=next(self._landmark_ids), **fields.model_dump())
        self._landmarks[landmark.id] = landmark
        return landmark

    def get_landmark(self, landmark_id: int) -> Optional[Landmark]:
        return self._landmarks.get(landmark_id)

    # Roads

    def list_roads(self) -> list[Road]:
        return list(self._roads.values())

    def roads_in_area(self, area: str) -> list[Road]:
        wanted = normalize_area(area)
        return [road for road in self._roads.values() if normalize_area(road.area) == wanted]

    def insert_road(self, fields: RoadCreate) -> Road:
        road = Road(id=next(self._road_ids), **fields.model_dump())
        self._roads[road.id] = road
        return road

    def get_road(self, road_id: int) -> Optional[Road]:
        return self._roads.get(road_id)
