"""Wikipedia feed MCP tools.

This module provides MCP tools for fetching feed articles and managing likes.

NOTE: Never use Optional parameters in MCP tools - they break MCP clients.
Use empty string "" for optional strings and 0 for optional integers.
"""

import logging
from typing import Any, Callable, Dict, List

from wiki_feed.services.catalog import ArticleCatalog

logger = logging.getLogger(__name__)


def create_article_tools(catalog: ArticleCatalog) -> List[Callable]:
    """Build the MCP tool functions bound to one article catalog.

    Args:
        catalog: Backend article operations

    Returns:
        Tool coroutine functions, ready for registration
    """

    async def get_random_article(
        require_thumbnail: bool = False,
        min_extract_length: int = 0,
    ) -> Dict[str, Any]:
        """Get one random Wikipedia article that passes the quality filter.

        List and disambiguation pages are always skipped.

        Args:
            require_thumbnail: Only return an article that has an image
            min_extract_length: Minimum extract length in characters (0 for server default)

        Returns:
            Dictionary with:
            - success: bool
            - article: object with id, title, extract, thumbnail, url, source, isLiked
        """
        logger.info(f"get_random_article called: require_thumbnail={require_thumbnail}")

        article = await catalog.random_article(
            require_thumbnail=require_thumbnail,
            min_extract_length=min_extract_length or None,
        )
        return {
            "success": True,
            "article": article.to_dict(),
        }

    async def get_random_articles(
        count: int = 0,
        require_thumbnail: bool = False,
        min_extract_length: int = 0,
    ) -> Dict[str, Any]:
        """Get a batch of random Wikipedia articles for the feed.

        The batch may hold fewer articles than requested when too few
        candidates pass the quality filter.

        Args:
            count: Number of articles (0 for default, capped at the server maximum)
            require_thumbnail: Only return articles that have an image
            min_extract_length: Minimum extract length in characters (0 for server default)

        Returns:
            Dictionary with:
            - success: bool
            - count: number of articles returned
            - articles: list of article objects in display order
        """
        logger.info(f"get_random_articles called: count={count}")

        articles = await catalog.random_articles(
            count=count or None,
            require_thumbnail=require_thumbnail,
            min_extract_length=min_extract_length or None,
        )
        return {
            "success": True,
            "count": len(articles),
            "articles": [a.to_dict() for a in articles],
        }

    async def get_trending_articles(count: int = 0) -> Dict[str, Any]:
        """Get the most viewed Wikipedia articles of the latest complete day.

        Args:
            count: Number of articles (0 for default, capped at the server maximum)

        Returns:
            Dictionary with:
            - success: bool
            - count: number of articles returned
            - articles: list of article objects with views and rank, in rank order
        """
        logger.info(f"get_trending_articles called: count={count}")

        articles = await catalog.trending_articles(count or None)
        return {
            "success": True,
            "count": len(articles),
            "articles": [a.to_dict() for a in articles],
        }

    async def get_articles(
        source: str = "random",
        count: int = 0,
        require_thumbnail: bool = False,
        min_extract_length: int = 0,
    ) -> Dict[str, Any]:
        """Get a page of feed articles from the chosen source.

        Args:
            source: "random" or "trending"
            count: Number of articles (0 for default, capped at the server maximum)
            require_thumbnail: Random source only - only articles that have an image
            min_extract_length: Random source only - minimum extract length (0 for server default)

        Returns:
            Dictionary with:
            - success: bool
            - source: the source used
            - count: number of articles returned
            - articles: list of article objects in display order
            - error: string if the source is unknown
        """
        logger.info(f"get_articles called: source={source}, count={count}")

        if source not in ("random", "trending"):
            return {
                "success": False,
                "error": f"Unknown source '{source}'. Use 'random' or 'trending'.",
            }

        articles = await catalog.articles(
            source=source,
            count=count or None,
            require_thumbnail=require_thumbnail,
            min_extract_length=min_extract_length or None,
        )
        return {
            "success": True,
            "source": source,
            "count": len(articles),
            "articles": [a.to_dict() for a in articles],
        }

    async def list_liked_articles() -> Dict[str, Any]:
        """List all liked articles, most recently liked first.

        Returns:
            Dictionary with:
            - success: bool
            - count: number of liked articles
            - articles: list of article objects
        """
        logger.info("list_liked_articles called")

        articles = await catalog.liked_articles()
        return {
            "success": True,
            "count": len(articles),
            "articles": [a.to_dict() for a in articles],
        }

    async def like_article(article_id: int) -> Dict[str, Any]:
        """Like an article previously served by the feed.

        Args:
            article_id: Wikipedia page id of the article

        Returns:
            Dictionary with:
            - success: bool
            - articleId: the article id
            - isLiked: true
            - error: string if the article was never served
        """
        logger.info(f"like_article called: article_id={article_id}")

        await catalog.like(article_id)
        return {
            "success": True,
            "articleId": article_id,
            "isLiked": True,
        }

    async def unlike_article(article_id: int) -> Dict[str, Any]:
        """Remove the like from an article.

        Args:
            article_id: Wikipedia page id of the article

        Returns:
            Dictionary with:
            - success: bool
            - articleId: the article id
            - isLiked: false
        """
        logger.info(f"unlike_article called: article_id={article_id}")

        await catalog.unlike(article_id)
        return {
            "success": True,
            "articleId": article_id,
            "isLiked": False,
        }

    return [
        get_random_article,
        get_random_articles,
        get_trending_articles,
        get_articles,
        list_liked_articles,
        like_article,
        unlike_article,
    ]
