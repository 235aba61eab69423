"""Shared test helpers: fake clock, stub strategies and record factories."""

import asyncio
from typing import Any, Optional

from app.models import LandmarkCreate, RoadCreate, SearchResult
from app.services.fallback import FetchStrategy


class FakeClock:
    """Controllable replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubStrategy(FetchStrategy[Any, Any]):
    """Fetch strategy returning canned records, raising, or waiting on a gate."""

    def __init__(
        self,
        name: str,
        records: Optional[list] = None,
        error: Optional[Exception] = None,
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        self._name = name
        self.records = records or []
        self.error = error
        self.gate = gate
        self.calls: list = []

    @property
    def name(self) -> str:
        return self._name

    async def fetch(self, params: Any) -> list:
        self.calls.append(params)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.records)


def make_landmark(
    title: str = "Bửu Long Mountain", lat: float = 10.96, lng: float = 106.85, page_id: int = 1001
) -> LandmarkCreate:
    return LandmarkCreate(
        title=title,
        page_id=page_id,
        extract=f"{title} is a landmark.",
        thumbnail="",
        coordinates=(lat, lng),
        distance="0.5 km away",
        url=f"https://en.wikipedia.org/wiki/{title.replace(' ', '_')}",
    )


def make_road(name: str = "Đường Đồng Khởi", area: str = "buu long") -> RoadCreate:
    return RoadCreate(
        name=name,
        coordinates=[(10.957, 106.830), (10.957, 106.835), (10.957, 106.840)],
        area=area,
        road_type="primary",
        tags={"highway": "primary", "name": name},
    )


def make_search_result(title: str = "Biên Hòa", page_id: int = 2001) -> SearchResult:
    return SearchResult(
        title=title,
        page_id=page_id,
        extract=f"{title} is a city.",
        snippet=f"{title} city",
        thumbnail="",
        url=f"https://en.wikipedia.org/wiki/{title.replace(' ', '_')}",
    )
