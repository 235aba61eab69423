"""Provider fallback chain: ordered fetch strategies with a fixture stage."""

from .service import ChainResult, FallbackChain, FetchStrategy, FixtureStrategy

__all__ = [
    "ChainResult",
    "FallbackChain",
    "FetchStrategy",
    "FixtureStrategy",
]
