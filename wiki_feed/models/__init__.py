"""Data models for wiki_feed."""

from .schemas import Article, ArticleOrigin

__all__ = ["Article", "ArticleOrigin"]
