"""MCP tools for wiki_feed."""

from .article_tools import create_article_tools

__all__ = ["create_article_tools"]
