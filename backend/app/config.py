"""Runtime configuration using Pydantic Settings.

Values come from environment variables (case-insensitive, no prefix) and an
optional ``.env`` file in the working directory.
"""

from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5000",
    "http://localhost:5173",
]


class Settings(BaseSettings):
    """Backend settings. Defaults match the reference deployment."""

    # Cache
    cache_ttl_seconds: int = Field(
        default=3600, gt=0, description="Lifetime of cached query results"
    )
    cache_sweep_interval_seconds: float = Field(
        default=300.0, gt=0, description="Interval between active expiry sweeps"
    )
    coalesce_requests: bool = Field(
        default=True, description="Share one fetch between concurrent identical misses"
    )

    # Upstream providers
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    wikipedia_api_url: str = "https://en.wikipedia.org/w/api.php"
    wikipedia_geosearch_radius: int = Field(default=10000, description="Meters")
    wikipedia_geosearch_limit: int = 10
    wikipedia_search_limit: int = 5
    overpass_url: str = "https://overpass-api.de/api/interpreter"
    geojson_roads_url: str = "https://osm-boundaries.com/api/v1/roads"

    # HTTP / logging
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS),
        description="Comma-separated allowed origins",
    )
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_prefix": "",
        "extra": "ignore",
    }

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
