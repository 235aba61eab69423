"""OpenStreetMap road data services.

Two live sources feed the road fallback chain:

1. Overpass API (primary): every ``highway`` way inside the area's bounding
   box, with node references resolved to coordinates.
2. OSM-derived GeoJSON road service (secondary): used when Overpass is slow,
   rate-limited or down.

When both fail the chain serves the area's local fixture roads
(see ``fixtures.py``).
"""

import logging
from typing import Any, Optional

import httpx

from app.models import RoadCreate, UpstreamError
from app.services.fallback import FetchStrategy, FixtureStrategy
from app.services.osm.fixtures import FIXTURE_ROADS, Area

logger = logging.getLogger(__name__)


def _road_name(tags: dict[str, Any]) -> str:
    """Display name for a way, falling back to its highway class."""
    name = tags.get("name") or tags.get("ref") or tags.get("name:vi")
    if name:
        return name
    highway = str(tags.get("highway", ""))
    return f"{highway[:1].upper()}{highway[1:]} Road"


class OSMOverpassService:
    """OpenStreetMap Overpass API client for road geometry."""

    PROVIDER = "overpass"
    OVERPASS_URL = "https://overpass-api.de/api/interpreter"

    HEADERS = {"User-Agent": "MapExplorer/1.0 (https://github.com/map-explorer)"}

    def __init__(
        self,
        overpass_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = overpass_url or self.OVERPASS_URL
        self._timeout = timeout
        self._transport = transport

    async def close(self) -> None:
        pass  # No persistent client to close

    @staticmethod
    def _build_roads_query(area: Area) -> str:
        """Build Overpass QL for all highway ways plus their nodes."""
        b = area.bbox
        return f"""
[out:json];
(
  way["highway"]({b.south},{b.west},{b.north},{b.east});
);
out body;
>;
out skel qt;
"""

    @staticmethod
    def parse_roads(data: dict, area: Area) -> list[RoadCreate]:
        """Turn an Overpass response into roads for ``area``.

        Way node order is kept as the polyline order; node ids missing from
        the response are skipped.
        """
        elements = data.get("elements")
        if not isinstance(elements, list):
            raise UpstreamError(OSMOverpassService.PROVIDER, "missing elements")

        nodes = {
            element["id"]: (element["lat"], element["lon"])
            for element in elements
            if element.get("type") == "node"
        }

        roads = []
        for element in elements:
            tags = element.get("tags") or {}
            if element.get("type") != "way" or not tags.get("highway"):
                continue
            coordinates = [nodes[node_id] for node_id in element.get("nodes", []) if node_id in nodes]
            roads.append(RoadCreate(
                name=_road_name(tags),
                coordinates=coordinates,
                area=area.name,
                road_type=tags["highway"],
                osm_id=element.get("id"),
                tags=tags,
            ))
        return roads

    async def query_roads(self, area: Area) -> list[RoadCreate]:
        """Query road ways inside the area's bounding box."""
        query = self._build_roads_query(area)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, headers=self.HEADERS, transport=self._transport
            ) as client:
                response = await client.post(
                    self._url,
                    data={"data": query},
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(self.PROVIDER, f"{type(e).__name__}: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamError(self.PROVIDER, "response is not a JSON object")
        try:
            roads = self.parse_roads(data, area)
        except (KeyError, TypeError) as e:
            raise UpstreamError(self.PROVIDER, f"malformed element: {e}") from e

        logger.info(f"[OSM] Overpass returned {len(roads)} roads for {area.name}")
        return roads


class GeoJSONRoadService:
    """Client for an OSM-derived GeoJSON road endpoint."""

    PROVIDER = "geojson"
    GEOJSON_URL = "https://osm-boundaries.com/api/v1/roads"

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url or self.GEOJSON_URL
        self._timeout = timeout
        self._transport = transport

    async def close(self) -> None:
        pass  # No persistent client to close

    @staticmethod
    def parse_roads(geojson: dict, area: Area) -> list[RoadCreate]:
        """Turn a FeatureCollection into roads. Only LineStrings are kept.

        GeoJSON positions are ``[lon, lat]``; roads store ``(lat, lon)``.
        """
        features = geojson.get("features")
        if not isinstance(features, list):
            raise UpstreamError(GeoJSONRoadService.PROVIDER, "missing features")

        roads = []
        for feature in features:
            geometry = feature.get("geometry") or {}
            if geometry.get("type") != "LineString":
                continue
            properties = feature.get("properties") or {}
            roads.append(RoadCreate(
                name=properties.get("name") or properties.get("highway") or "Unnamed Road",
                coordinates=[(lat, lon) for lon, lat, *_ in geometry.get("coordinates", [])],
                area=area.name,
                road_type=properties.get("highway"),
                tags=properties,
            ))
        return roads

    async def query_roads(self, area: Area) -> list[RoadCreate]:
        b = area.bbox
        params = {"bbox": f"{b.west},{b.south},{b.east},{b.north}", "format": "geojson"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._url, params=params)
                response.raise_for_status()
                geojson = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(self.PROVIDER, f"{type(e).__name__}: {e}") from e

        if not isinstance(geojson, dict):
            raise UpstreamError(self.PROVIDER, "response is not a JSON object")
        try:
            roads = self.parse_roads(geojson, area)
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(self.PROVIDER, f"malformed feature: {e}") from e

        logger.info(f"[OSM] GeoJSON returned {len(roads)} roads for {area.name}")
        return roads


class OverpassRoadStrategy(FetchStrategy[Area, RoadCreate]):
    def __init__(self, service: OSMOverpassService) -> None:
        self._service = service

    @property
    def name(self) -> str:
        return "overpass"

    async def fetch(self, params: Area) -> list[RoadCreate]:
        return await self._service.query_roads(params)


class GeoJSONRoadStrategy(FetchStrategy[Area, RoadCreate]):
    def __init__(self, service: GeoJSONRoadService) -> None:
        self._service = service

    @property
    def name(self) -> str:
        return "geojson"

    async def fetch(self, params: Area) -> list[RoadCreate]:
        return await self._service.query_roads(params)


def fixture_road_strategy() -> FixtureStrategy[Area, RoadCreate]:
    """Fixture stage serving the built-in roads of a known area."""
    return FixtureStrategy(FIXTURE_ROADS, key_fn=lambda area: area.key)
