"""Article catalog: backend operations shared by MCP tools and HTTP routes.

Every article handed out is stored (so it can be liked later) and annotated
with its current like status.
"""

import logging
from typing import List, Optional, Sequence

from wiki_feed.config import ServerConfig
from wiki_feed.models.schemas import Article
from wiki_feed.services import wikipedia
from wiki_feed.storage.database import Database

logger = logging.getLogger(__name__)


class ArticleCatalog:
    """Backend article operations over Wikipedia and the like store."""

    def __init__(self, database: Database, config: ServerConfig):
        self.database = database
        self.config = config

    def clamp_count(self, count: Optional[int]) -> int:
        """Apply the default and the [1, max_batch_count] bounds."""
        if count is None:
            count = self.config.default_batch_count
        return max(1, min(count, self.config.max_batch_count))

    def min_extract_length(self, value: Optional[int]) -> int:
        if value is None:
            return self.config.default_min_extract_length
        return max(0, value)

    async def _publish(self, articles: Sequence[Article]) -> List[Article]:
        if not articles:
            return []
        await self.database.save_articles(articles)
        return await self.database.add_like_status(articles)

    async def random_article(
        self,
        require_thumbnail: bool = False,
        min_extract_length: Optional[int] = None,
    ) -> Article:
        article = await wikipedia.get_random_article(
            require_thumbnail=require_thumbnail,
            min_extract_length=self.min_extract_length(min_extract_length),
            config=self.config,
        )
        published = await self._publish([article])
        return published[0]

    async def random_articles(
        self,
        count: Optional[int] = None,
        require_thumbnail: bool = False,
        min_extract_length: Optional[int] = None,
    ) -> List[Article]:
        articles = await wikipedia.get_random_articles(
            count=self.clamp_count(count),
            require_thumbnail=require_thumbnail,
            min_extract_length=self.min_extract_length(min_extract_length),
            config=self.config,
        )
        return await self._publish(articles)

    async def trending_articles(self, count: Optional[int] = None) -> List[Article]:
        articles = await wikipedia.get_trending_articles(
            count=self.clamp_count(count),
            config=self.config,
        )
        return await self._publish(articles)

    async def articles(
        self,
        source: str = "random",
        count: Optional[int] = None,
        require_thumbnail: bool = False,
        min_extract_length: Optional[int] = None,
    ) -> List[Article]:
        """Articles from the named source; anything but "trending" is random."""
        if source == "trending":
            return await self.trending_articles(count)
        return await self.random_articles(count, require_thumbnail, min_extract_length)

    async def liked_articles(self) -> List[Article]:
        return await self.database.get_liked_articles()

    async def like(self, article_id: int) -> None:
        await self.database.like_article(article_id)
        logger.info(f"Liked article {article_id}")

    async def unlike(self, article_id: int) -> None:
        await self.database.unlike_article(article_id)
        logger.info(f"Unliked article {article_id}")
