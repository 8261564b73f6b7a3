"""Services for wiki_feed."""

from .catalog import ArticleCatalog
from .quality import passes_quality_filter
from .wikipedia import get_random_article, get_random_articles, get_trending_articles

__all__ = [
    "ArticleCatalog",
    "get_random_article",
    "get_random_articles",
    "get_trending_articles",
    "passes_quality_filter",
]
