"""Error types and response envelopes.

Three failure classes flow through the backend:

- Validation failures: bad query parameters. Rejected by the API layer
  (FastAPI query validation or ``ValueError`` from the explorer) before any
  cache or store access.
- ``UpstreamError``: one provider fetch failed. Caught by the fallback
  chain, logged, and recovered by trying the next strategy.
- ``ServiceError``: anything unexpected while orchestrating a query.
  Surfaced to the caller as an opaque failure, never retried.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to the client."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    SERVICE_ERROR = "SERVICE_ERROR"


class AppError(BaseModel):
    """Error payload included in failed API responses."""

    code: ErrorCode
    message: str = Field(..., description="Technical description")
    user_message: str = Field(..., description="Message safe to show to users")


class ErrorResponse(BaseModel):
    success: bool = False
    error: AppError


class UpstreamError(Exception):
    """A single provider fetch failed (transport error or bad response)."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ServiceError(Exception):
    """Unexpected failure while orchestrating a query."""

    def __init__(self, message: str, cache_key: Optional[str] = None) -> None:
        super().__init__(message)
        self.cache_key = cache_key


class UnknownAreaError(ValueError):
    """Requested road area is not in the area registry."""

    def __init__(self, area: str) -> None:
        super().__init__(f"Unknown area: {area!r}")
        self.area = area
