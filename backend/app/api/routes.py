"""API routes for Map Explorer.

Thin HTTP layer over ``MapExplorerService``:
- Query parameters are validated here; bad input never reaches the cache
  or the store.
- Successful responses are plain JSON arrays (or one object) of camelCase
  records.
- Failures use the ``{"success": false, "error": {...}}`` envelope.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from app.models import (
    AppError,
    ErrorCode,
    ErrorResponse,
    Landmark,
    Road,
    SearchResult,
    ServiceError,
    UnknownAreaError,
)
from app.services import MapExplorerService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_explorer_service(request: Request) -> MapExplorerService:
    """The explorer built by the application lifespan."""
    return request.app.state.explorer


def error_response(
    status_code: int, code: ErrorCode, message: str, user_message: str
) -> JSONResponse:
    body = ErrorResponse(error=AppError(code=code, message=message, user_message=user_message))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.get("/landmarks", response_model=list[Landmark])
async def get_landmarks(
    south: float = Query(..., allow_inf_nan=False, description="Southern latitude of the viewport"),
    west: float = Query(..., allow_inf_nan=False, description="Western longitude of the viewport"),
    north: float = Query(..., allow_inf_nan=False, description="Northern latitude of the viewport"),
    east: float = Query(..., allow_inf_nan=False, description="Eastern longitude of the viewport"),
    explorer: MapExplorerService = Depends(get_explorer_service),
):
    """Landmarks in (or near) the given bounds."""
    try:
        return await explorer.query_landmarks_by_bounds(south, west, north, east)
    except ServiceError as e:
        return error_response(
            500, ErrorCode.SERVICE_ERROR, str(e), "Failed to fetch landmarks. Please try again."
        )


@router.get("/landmarks/{landmark_id}", response_model=Landmark)
async def get_landmark(
    landmark_id: int,
    explorer: MapExplorerService = Depends(get_explorer_service),
):
    landmark = explorer.get_landmark(landmark_id)
    if landmark is None:
        return error_response(
            404, ErrorCode.NOT_FOUND, f"Landmark {landmark_id} not found", "Landmark not found."
        )
    return landmark


@router.get("/roads/{area}", response_model=list[Road])
async def get_roads(
    area: str,
    explorer: MapExplorerService = Depends(get_explorer_service),
):
    """Roads for a known area. ``buu-long`` and ``Buu Long`` name the same area."""
    try:
        return await explorer.query_roads_by_area(area.replace("-", " "))
    except UnknownAreaError as e:
        return error_response(404, ErrorCode.NOT_FOUND, str(e), "No road data for this area.")
    except ServiceError as e:
        return error_response(
            500, ErrorCode.SERVICE_ERROR, str(e), "Failed to fetch roads. Please try again."
        )


@router.get("/search", response_model=list[SearchResult])
async def search_landmarks(
    q: Optional[str] = Query(None, description="Free-text search query"),
    explorer: MapExplorerService = Depends(get_explorer_service),
):
    text = (q or "").strip()
    if not text:
        return error_response(
            400, ErrorCode.INVALID_INPUT, "Search query is required",
            "Please enter something to search for.",
        )
    try:
        return await explorer.query_landmarks_by_search(text)
    except ServiceError as e:
        return error_response(
            500, ErrorCode.SERVICE_ERROR, str(e), "Search failed. Please try again."
        )
