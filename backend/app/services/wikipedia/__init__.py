"""Wikipedia geosearch and article search."""

from .service import (
    WikipediaGeosearchStrategy,
    WikipediaSearchStrategy,
    WikipediaService,
    article_url,
)

__all__ = [
    "WikipediaGeosearchStrategy",
    "WikipediaSearchStrategy",
    "WikipediaService",
    "article_url",
]
