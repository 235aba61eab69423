"""Query orchestration over cache, store and provider chains."""

from .service import MapExplorerService

__all__ = ["MapExplorerService"]
