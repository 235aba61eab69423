"""Known road areas and their local fallback road data.

The fixture roads are served when every live road source fails, so an area
query always has something to draw.
"""

from dataclasses import dataclass

from app.models import BoundingBox, RoadCreate
from app.services.storage import normalize_area


@dataclass(frozen=True)
class Area:
    """A named region that road queries can target."""

    name: str
    bbox: BoundingBox

    @property
    def key(self) -> str:
        return normalize_area(self.name)


BUU_LONG = Area(
    name="buu long",
    bbox=BoundingBox(south=10.94, west=106.82, north=10.98, east=106.88),
)

KNOWN_AREAS: dict[str, Area] = {BUU_LONG.key: BUU_LONG}


def _road(name: str, road_type: str, coordinates: list[tuple[float, float]]) -> RoadCreate:
    return RoadCreate(name=name, coordinates=coordinates, area=BUU_LONG.name, road_type=road_type)


BUU_LONG_ROADS: list[RoadCreate] = [
    _road("Đường Đồng Khởi", "primary", [
        (10.958, 106.830), (10.9578, 106.835), (10.9575, 106.840),
        (10.9572, 106.845), (10.9570, 106.850), (10.9568, 106.855),
        (10.9565, 106.860), (10.9562, 106.865), (10.9560, 106.870),
    ]),
    _road("Đường Phạm Văn Thuận", "primary", [
        (10.972, 106.858), (10.970, 106.8582), (10.968, 106.8584),
        (10.966, 106.859), (10.964, 106.8595), (10.962, 106.860),
        (10.960, 106.8605), (10.958, 106.861), (10.956, 106.8615),
        (10.954, 106.862), (10.952, 106.8625), (10.950, 106.863),
        (10.948, 106.8635),
    ]),
    _road("Đường Võ Thị Sáu", "secondary", [
        (10.972, 106.848), (10.970, 106.8485), (10.968, 106.849),
        (10.966, 106.8495), (10.964, 106.850), (10.962, 106.8505),
        (10.960, 106.851), (10.958, 106.8515), (10.956, 106.852),
        (10.954, 106.8525), (10.952, 106.853), (10.950, 106.8535),
        (10.948, 106.854),
    ]),
    _road("Đường Bửu Long", "secondary", [
        (10.976, 106.830), (10.974, 106.834), (10.972, 106.838),
        (10.970, 106.842), (10.968, 106.846), (10.966, 106.850),
        (10.965, 106.853), (10.964, 106.856), (10.963, 106.859),
        (10.962, 106.862), (10.960, 106.866), (10.958, 106.870),
        (10.956, 106.874),
    ]),
    _road("Đường Cách Mạng Tháng Tám", "secondary", [
        (10.946, 106.845), (10.947, 106.848), (10.949, 106.850),
        (10.951, 106.851), (10.953, 106.851), (10.955, 106.850),
        (10.957, 106.851), (10.959, 106.853), (10.961, 106.856),
        (10.962, 106.860), (10.963, 106.865), (10.964, 106.870),
    ]),
    _road("Đường Nội Bộ ĐH Đồng Nai (Main)", "service", [
        (10.956, 106.853), (10.9562, 106.8532), (10.9565, 106.8535),
        (10.957, 106.854), (10.9575, 106.8545), (10.958, 106.855),
        (10.9585, 106.8552), (10.959, 106.8555), (10.9595, 106.8558),
    ]),
    # Closed loop: first and last points coincide
    _road("Vòng Xoay Đồng Khởi", "tertiary", [
        (10.958, 106.848), (10.9582, 106.8478), (10.9585, 106.8475),
        (10.9588, 106.8473), (10.959, 106.8472), (10.9592, 106.8473),
        (10.9595, 106.8475), (10.9597, 106.8478), (10.9598, 106.848),
        (10.9597, 106.8482), (10.9595, 106.8485), (10.9592, 106.8487),
        (10.959, 106.8488), (10.9588, 106.8487), (10.9585, 106.8485),
        (10.9582, 106.8482), (10.958, 106.848),
    ]),
]

FIXTURE_ROADS: dict[str, list[RoadCreate]] = {BUU_LONG.key: BUU_LONG_ROADS}
