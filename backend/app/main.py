"""Map Explorer FastAPI Application.

Main entry point for the backend API server. The lifespan handler builds
the service graph (store, cache, provider chains, explorer), keeps it on
``app.state`` and runs the periodic cache sweep.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import router
from app.config import Settings, get_settings
from app.models import AppError, ErrorCode, ErrorResponse
from app.services import (
    CacheSweeper,
    FallbackChain,
    GeoJSONRoadService,
    GeoJSONRoadStrategy,
    MapExplorerService,
    MemoryCacheService,
    MemoryStorageService,
    OSMOverpassService,
    OverpassRoadStrategy,
    WikipediaGeosearchStrategy,
    WikipediaSearchStrategy,
    WikipediaService,
    fixture_road_strategy,
)

logger = logging.getLogger(__name__)


def build_explorer_service(
    settings: Settings,
    storage: MemoryStorageService,
    cache: MemoryCacheService,
    wikipedia: WikipediaService,
    overpass: OSMOverpassService,
    geojson: GeoJSONRoadService,
) -> MapExplorerService:
    """Wire provider chains into an explorer."""
    landmark_chain = FallbackChain(
        [
            WikipediaGeosearchStrategy(
                wikipedia,
                radius=settings.wikipedia_geosearch_radius,
                limit=settings.wikipedia_geosearch_limit,
            )
        ],
        label="landmarks",
    )
    road_chain = FallbackChain(
        [OverpassRoadStrategy(overpass), GeoJSONRoadStrategy(geojson)],
        fixture=fixture_road_strategy(),
        label="roads",
    )
    search_chain = FallbackChain(
        [WikipediaSearchStrategy(wikipedia, limit=settings.wikipedia_search_limit)],
        label="search",
    )
    return MapExplorerService(
        storage=storage,
        cache=cache,
        landmark_chain=landmark_chain,
        road_chain=road_chain,
        search_chain=search_chain,
        ttl_seconds=settings.cache_ttl_seconds,
        coalesce_requests=settings.coalesce_requests,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings: Settings = app.state.settings

    # Startup
    wikipedia = WikipediaService(
        api_url=settings.wikipedia_api_url, timeout=settings.http_timeout_seconds
    )
    overpass = OSMOverpassService(
        overpass_url=settings.overpass_url, timeout=settings.http_timeout_seconds
    )
    geojson = GeoJSONRoadService(
        url=settings.geojson_roads_url, timeout=settings.http_timeout_seconds
    )
    cache = MemoryCacheService(default_ttl=settings.cache_ttl_seconds)
    app.state.explorer = build_explorer_service(
        settings, MemoryStorageService(), cache, wikipedia, overpass, geojson
    )
    sweeper = CacheSweeper(cache, interval_seconds=settings.cache_sweep_interval_seconds)
    sweeper.start()
    app.state.sweeper = sweeper
    logger.info(
        f"[APP] Started (ttl={settings.cache_ttl_seconds}s, "
        f"sweep every {settings.cache_sweep_interval_seconds}s, "
        f"coalesce={settings.coalesce_requests})"
    )

    yield

    # Shutdown
    await sweeper.stop()
    await wikipedia.close()
    await overpass.close()
    await geojson.close()


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    body = ErrorResponse(
        error=AppError(
            code=ErrorCode.VALIDATION_ERROR,
            message=str(exc.errors()),
            user_message="Invalid request parameters. Please check your input.",
        )
    )
    return JSONResponse(status_code=422, content=body.model_dump(mode="json"))


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.exception("Unhandled error")
    body = ErrorResponse(
        error=AppError(
            code=ErrorCode.SERVICE_ERROR,
            message=str(exc),
            user_message="Something went wrong. Please try again.",
        )
    )
    return JSONResponse(status_code=500, content=body.model_dump(mode="json"))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    app = FastAPI(
        title="Map Explorer API",
        description="Landmarks, roads and search for the map explorer",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        explorer: Optional[MapExplorerService] = getattr(request.app.state, "explorer", None)
        return {
            "status": "healthy",
            "stats": explorer.stats() if explorer is not None else {},
        }

    return app


app = create_app()
