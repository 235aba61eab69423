"""Wikipedia API service for landmark geosearch and free-text search.

No API key required.

Architecture:
- Shared httpx client with connection pooling (one per service instance)
- Semaphore-based rate limiting (max 3 concurrent requests)
- Retry once on transient failures (timeout, connect error, HTTP 429)
- Geosearch/search hits are enriched with a per-page details lookup
  (intro extract + thumbnail); a failed details lookup degrades to
  defaults instead of failing the whole query
"""

import asyncio
import logging
import re
from typing import Any, Optional
from urllib.parse import quote

import httpx

from app.models import BoundingBox, Coordinate, LandmarkCreate, SearchResult, UpstreamError
from app.services.fallback import FetchStrategy

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description available"
_SPAN_TAG = re.compile(r"</?span[^>]*>")


def article_url(title: str) -> str:
    """Build the article URL for a page title."""
    return "https://en.wikipedia.org/wiki/" + quote(title.replace(" ", "_"), safe="")


class WikipediaService:
    """Wikipedia Action API client.

    Transport failures, non-2xx responses and malformed bodies raise
    ``UpstreamError`` so a fallback chain can log them and move on.
    """

    PROVIDER = "wikipedia"

    HEADERS = {
        "User-Agent": "MapExplorer/1.0 (https://github.com/map-explorer)",
        "Accept": "application/json",
    }

    def __init__(
        self,
        api_url: str = "https://en.wikipedia.org/w/api.php",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_delay: float = 1.5,
    ) -> None:
        self._api_url = api_url
        self._timeout = timeout
        self._retry_delay = retry_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        # Max 3 concurrent requests to Wikipedia
        self._semaphore = asyncio.Semaphore(3)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=self.HEADERS,
                limits=httpx.Limits(max_connections=8, max_keepalive_connections=4),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request_with_retry(self, params: dict, max_retries: int = 1) -> dict:
        """GET the Action API with one retry on transient failures."""
        client = self._get_client()
        params = {"format": "json", **params}
        for attempt in range(max_retries + 1):
            try:
                async with self._semaphore:
                    response = await client.get(self._api_url, params=params)
                    response.raise_for_status()
                    data = response.json()
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < max_retries:
                    logger.info(f"[WIKI] Retry {attempt+1}/{max_retries}: {type(e).__name__}")
                    await asyncio.sleep(self._retry_delay)
                    continue
                raise UpstreamError(self.PROVIDER, f"{type(e).__name__}: {e}") from e
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429 and attempt < max_retries:
                    await asyncio.sleep(self._retry_delay)
                    continue
                raise UpstreamError(
                    self.PROVIDER, f"HTTP {e.response.status_code}"
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                raise UpstreamError(self.PROVIDER, f"{type(e).__name__}: {e}") from e

            if not isinstance(data, dict):
                raise UpstreamError(self.PROVIDER, "response is not a JSON object")
            return data
        raise UpstreamError(self.PROVIDER, "retries exhausted")

    @staticmethod
    def _query_list(data: dict, name: str) -> list[dict[str, Any]]:
        items = (data.get("query") or {}).get(name)
        if not isinstance(items, list):
            raise UpstreamError(WikipediaService.PROVIDER, f"missing query.{name}")
        return items

    async def geosearch(
        self, center: Coordinate, radius: int = 10000, limit: int = 10
    ) -> list[dict[str, Any]]:
        """Find pages near a point.

        Returns:
            Raw geosearch items (``pageid``, ``title``, ``lat``, ``lon``, ``dist``).
        """
        lat, lng = center
        data = await self._request_with_retry({
            "action": "query",
            "list": "geosearch",
            "gscoord": f"{lat}|{lng}",
            "gsradius": radius,
            "gslimit": limit,
        })
        return self._query_list(data, "geosearch")

    async def search(self, text: str, limit: int = 5) -> list[dict[str, Any]]:
        """Full-text search. Returns at most ``limit`` raw search items."""
        data = await self._request_with_retry({
            "action": "query",
            "list": "search",
            "srsearch": text,
        })
        return self._query_list(data, "search")[:limit]

    async def page_details(self, page_id: int) -> tuple[str, str]:
        """Fetch the intro extract and thumbnail URL for a page.

        Returns ``("", "")`` when the page or the request is unavailable.
        """
        try:
            data = await self._request_with_retry({
                "action": "query",
                "prop": "extracts|pageimages",
                "exintro": "true",
                "explaintext": "true",
                "pageids": page_id,
                "pithumbsize": 300,
            })
        except UpstreamError as e:
            logger.info(f"[WIKI] Details for page {page_id} unavailable: {e}")
            return "", ""

        page = ((data.get("query") or {}).get("pages") or {}).get(str(page_id))
        if not page:
            return "", ""
        thumbnail = (page.get("thumbnail") or {}).get("source", "")
        return page.get("extract") or "", thumbnail

    async def landmarks_near(
        self, bbox: BoundingBox, radius: int = 10000, limit: int = 10
    ) -> list[LandmarkCreate]:
        """Landmarks around the center of ``bbox``, with details filled in."""
        items = await self.geosearch(bbox.center, radius=radius, limit=limit)
        details = await asyncio.gather(*(self.page_details(item["pageid"]) for item in items))

        landmarks = []
        for item, (extract, thumbnail) in zip(items, details):
            landmarks.append(LandmarkCreate(
                title=item["title"],
                page_id=item["pageid"],
                extract=extract or NO_DESCRIPTION,
                thumbnail=thumbnail,
                coordinates=(item["lat"], item["lon"]),
                distance=f"{item.get('dist', 0) / 1000:.1f} km away",
                url=article_url(item["title"]),
            ))
        logger.info(f"[WIKI] {len(landmarks)} landmarks near {bbox.center}")
        return landmarks

    async def search_results(self, text: str, limit: int = 5) -> list[SearchResult]:
        """Search hits for ``text``, with details filled in."""
        items = await self.search(text, limit=limit)
        details = await asyncio.gather(*(self.page_details(item["pageid"]) for item in items))

        return [
            SearchResult(
                title=item["title"],
                page_id=item["pageid"],
                extract=extract or NO_DESCRIPTION,
                snippet=_SPAN_TAG.sub("", item.get("snippet", "")),
                thumbnail=thumbnail,
                url=article_url(item["title"]),
            )
            for item, (extract, thumbnail) in zip(items, details)
        ]


class WikipediaGeosearchStrategy(FetchStrategy[BoundingBox, LandmarkCreate]):
    """Landmarks near the center of a bounding box."""

    def __init__(self, service: WikipediaService, radius: int = 10000, limit: int = 10) -> None:
        self._service = service
        self._radius = radius
        self._limit = limit

    @property
    def name(self) -> str:
        return "wikipedia-geosearch"

    async def fetch(self, params: BoundingBox) -> list[LandmarkCreate]:
        try:
            return await self._service.landmarks_near(
                params, radius=self._radius, limit=self._limit
            )
        except (KeyError, TypeError) as e:
            raise UpstreamError(WikipediaService.PROVIDER, f"malformed geosearch item: {e}") from e


class WikipediaSearchStrategy(FetchStrategy[str, SearchResult]):
    """Free-text article search."""

    def __init__(self, service: WikipediaService, limit: int = 5) -> None:
        self._service = service
        self._limit = limit

    @property
    def name(self) -> str:
        return "wikipedia-search"

    async def fetch(self, params: str) -> list[SearchResult]:
        try:
            return await self._service.search_results(params, limit=self._limit)
        except (KeyError, TypeError) as e:
            raise UpstreamError(WikipediaService.PROVIDER, f"malformed search item: {e}") from e
