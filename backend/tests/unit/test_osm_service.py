"""Unit tests for the OSM road services, areas and fixture roads."""

from urllib.parse import parse_qs

import httpx
import pytest

from app.models import UpstreamError
from app.services.fallback import FallbackChain
from app.services.osm import (
    BUU_LONG,
    BUU_LONG_ROADS,
    KNOWN_AREAS,
    GeoJSONRoadService,
    GeoJSONRoadStrategy,
    OSMOverpassService,
    OverpassRoadStrategy,
    fixture_road_strategy,
)

OVERPASS_DATA = {
    "elements": [
        {"type": "way", "id": 100, "nodes": [1, 2, 3], "tags": {"highway": "primary", "name": "Đồng Khởi"}},
        {"type": "way", "id": 101, "nodes": [3, 99, 1], "tags": {"highway": "residential", "ref": "DT768"}},
        {"type": "way", "id": 102, "nodes": [2, 3], "tags": {"highway": "service"}},
        {"type": "way", "id": 103, "nodes": [1, 2], "tags": {"building": "yes"}},
        {"type": "node", "id": 1, "lat": 10.957, "lon": 106.830},
        {"type": "node", "id": 2, "lat": 10.957, "lon": 106.835},
        {"type": "node", "id": 3, "lat": 10.958, "lon": 106.840},
    ]
}

GEOJSON_DATA = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"name": "Võ Thị Sáu", "highway": "secondary"},
            "geometry": {"type": "LineString", "coordinates": [[106.848, 10.972], [106.8485, 10.970]]},
        },
        {
            "type": "Feature",
            "properties": {"highway": "tertiary"},
            "geometry": {"type": "LineString", "coordinates": [[106.85, 10.95]]},
        },
        {
            "type": "Feature",
            "properties": {},
            "geometry": {"type": "LineString", "coordinates": []},
        },
        {
            "type": "Feature",
            "properties": {"name": "A point"},
            "geometry": {"type": "Point", "coordinates": [106.85, 10.95]},
        },
    ],
}


class TestAreas:
    def test_known_areas_keyed_by_normalized_name(self) -> None:
        assert KNOWN_AREAS["buu long"] is BUU_LONG
        assert BUU_LONG.key == "buu long"

    def test_buu_long_bbox(self) -> None:
        bbox = BUU_LONG.bbox
        assert (bbox.south, bbox.west, bbox.north, bbox.east) == (10.94, 106.82, 10.98, 106.88)

    def test_fixture_roads_belong_to_area(self) -> None:
        assert len(BUU_LONG_ROADS) == 7
        assert all(road.area == "buu long" for road in BUU_LONG_ROADS)
        assert all(road.coordinates for road in BUU_LONG_ROADS)

    def test_roundabout_is_closed(self) -> None:
        roundabout = next(r for r in BUU_LONG_ROADS if r.road_type == "tertiary")
        assert roundabout.coordinates[0] == roundabout.coordinates[-1]


class TestOverpassParsing:
    """Tests for Overpass response parsing."""

    def test_parse_highway_ways(self) -> None:
        roads = OSMOverpassService.parse_roads(OVERPASS_DATA, BUU_LONG)
        assert [r.osm_id for r in roads] == [100, 101, 102]

        main = roads[0]
        assert main.name == "Đồng Khởi"
        assert main.road_type == "primary"
        assert main.area == "buu long"
        assert main.coordinates == [(10.957, 106.830), (10.957, 106.835), (10.958, 106.840)]
        assert main.tags == {"highway": "primary", "name": "Đồng Khởi"}

    def test_unknown_nodes_skipped_order_kept(self) -> None:
        roads = OSMOverpassService.parse_roads(OVERPASS_DATA, BUU_LONG)
        assert roads[1].coordinates == [(10.958, 106.840), (10.957, 106.830)]

    def test_name_fallbacks(self) -> None:
        roads = OSMOverpassService.parse_roads(OVERPASS_DATA, BUU_LONG)
        assert roads[1].name == "DT768"
        assert roads[2].name == "Service Road"

    def test_missing_elements_raises(self) -> None:
        with pytest.raises(UpstreamError):
            OSMOverpassService.parse_roads({"remark": "timeout"}, BUU_LONG)

    def test_query_contains_bbox(self) -> None:
        query = OSMOverpassService._build_roads_query(BUU_LONG)
        assert 'way["highway"](10.94,106.82,10.98,106.88);' in query
        assert "out skel qt;" in query


class TestOverpassQuery:
    """Tests for the Overpass HTTP call."""

    @pytest.mark.asyncio
    async def test_query_roads_posts_form(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(200, json=OVERPASS_DATA)

        service = OSMOverpassService(transport=httpx.MockTransport(handler))
        roads = await service.query_roads(BUU_LONG)

        assert seen["method"] == "POST"
        assert 'way["highway"]' in seen["form"]["data"][0]
        assert len(roads) == 3

    @pytest.mark.asyncio
    async def test_http_error_raises_upstream_error(self) -> None:
        service = OSMOverpassService(transport=httpx.MockTransport(lambda r: httpx.Response(429)))
        with pytest.raises(UpstreamError, match="overpass"):
            await service.query_roads(BUU_LONG)

    @pytest.mark.asyncio
    async def test_malformed_node_raises_upstream_error(self) -> None:
        bad = {"elements": [{"type": "node", "id": 1}]}
        service = OSMOverpassService(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=bad)))
        with pytest.raises(UpstreamError):
            await service.query_roads(BUU_LONG)


class TestGeoJSON:
    """Tests for the GeoJSON road service."""

    def test_parse_line_strings_only(self) -> None:
        roads = GeoJSONRoadService.parse_roads(GEOJSON_DATA, BUU_LONG)
        assert len(roads) == 3
        assert roads[0].name == "Võ Thị Sáu"
        assert roads[0].road_type == "secondary"
        assert roads[1].name == "tertiary"
        assert roads[2].name == "Unnamed Road"

    def test_coordinates_swapped_to_lat_lon(self) -> None:
        roads = GeoJSONRoadService.parse_roads(GEOJSON_DATA, BUU_LONG)
        assert roads[0].coordinates == [(10.972, 106.848), (10.970, 106.8485)]

    @pytest.mark.asyncio
    async def test_query_roads_sends_bbox(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json=GEOJSON_DATA)

        service = GeoJSONRoadService(transport=httpx.MockTransport(handler))
        roads = await service.query_roads(BUU_LONG)

        assert seen["bbox"] == "106.82,10.94,106.88,10.98"
        assert seen["format"] == "geojson"
        assert len(roads) == 3

    @pytest.mark.asyncio
    async def test_missing_features_raises(self) -> None:
        service = GeoJSONRoadService(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))
        with pytest.raises(UpstreamError):
            await service.query_roads(BUU_LONG)


class TestRoadChain:
    """The configured road chain degrades from Overpass to GeoJSON to fixtures."""

    @staticmethod
    def make_chain(overpass_handler, geojson_handler) -> FallbackChain:
        return FallbackChain(
            [
                OverpassRoadStrategy(OSMOverpassService(transport=httpx.MockTransport(overpass_handler))),
                GeoJSONRoadStrategy(GeoJSONRoadService(transport=httpx.MockTransport(geojson_handler))),
            ],
            fixture=fixture_road_strategy(),
            label="roads",
        )

    @pytest.mark.asyncio
    async def test_overpass_first(self) -> None:
        chain = self.make_chain(
            lambda r: httpx.Response(200, json=OVERPASS_DATA),
            lambda r: httpx.Response(200, json=GEOJSON_DATA),
        )
        result = await chain.run(BUU_LONG)
        assert result.source == "overpass"

    @pytest.mark.asyncio
    async def test_geojson_when_overpass_down(self) -> None:
        chain = self.make_chain(
            lambda r: httpx.Response(504),
            lambda r: httpx.Response(200, json=GEOJSON_DATA),
        )
        result = await chain.run(BUU_LONG)
        assert result.source == "geojson"
        assert len(result.records) == 3

    @pytest.mark.asyncio
    async def test_fixture_when_all_down(self) -> None:
        chain = self.make_chain(
            lambda r: httpx.Response(504),
            lambda r: httpx.Response(200, json={"type": "FeatureCollection", "features": []}),
        )
        result = await chain.run(BUU_LONG)
        assert result.from_fixture
        assert result.records == BUU_LONG_ROADS
