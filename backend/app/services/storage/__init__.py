"""In-memory entity store for landmarks and roads."""

from .service import MemoryStorageService, StorageService, normalize_area

__all__ = [
    "MemoryStorageService",
    "StorageService",
    "normalize_area",
]
