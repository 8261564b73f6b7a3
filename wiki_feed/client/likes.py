"""Like toggling with optimistic local state.

A toggle is a two-phase transition: the flipped flag is applied locally
first, then confirmed or rolled back once the backend answers.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Set

import httpx

from wiki_feed.errors import PersistenceError
from wiki_feed.models.schemas import Article

logger = logging.getLogger(__name__)


class HttpLikeClient:
    """Persist likes through ``POST``/``DELETE /api/articles/{id}/like``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def set_liked(self, article_id: int, liked: bool) -> None:
        """Persist the like flag for one article.

        Raises:
            PersistenceError: If the request fails for any reason
        """
        url = f"{self.base_url}/api/articles/{article_id}/like"
        method = "POST" if liked else "DELETE"

        try:
            if self._client is not None:
                response = await self._client.request(method, url, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url)
        except httpx.HTTPError as e:
            raise PersistenceError(f"Failed to update like: {e}") from e

        if response.is_error:
            raise PersistenceError(f"Failed to update like: HTTP error {response.status_code}")


@dataclass(frozen=True)
class LikeResult:
    """Outcome of a toggle: the article as it should now be shown."""

    article: Article
    committed: bool
    error: Optional[str] = None


class LikeToggle:
    """Apply like toggles optimistically and revert them on failure.

    Args:
        client: Anything with ``async set_liked(article_id, liked)``
        apply: Callback publishing an article value (e.g. the controller's
            ``replace_article``)
    """

    def __init__(self, client: HttpLikeClient, apply: Callable[[Article], object]):
        self._client = client
        self._apply = apply
        self._pending: Set[int] = set()

    def is_pending(self, article_id: int) -> bool:
        return article_id in self._pending

    async def toggle(self, article: Article) -> LikeResult:
        """Flip the like flag of ``article``.

        While a toggle for the same article is pending, further toggles are
        ignored and report ``committed=False`` without an error.
        """
        if article.id in self._pending:
            return LikeResult(article=article, committed=False)

        tentative = article.with_liked(not bool(article.is_liked))
        self._pending.add(article.id)
        self._apply(tentative)

        try:
            await self._client.set_liked(article.id, bool(tentative.is_liked))
        except PersistenceError as e:
            logger.warning(f"Error toggling like for {article.id}: {e}")
            self._apply(article)
            return LikeResult(article=article, committed=False, error=str(e))
        finally:
            self._pending.discard(article.id)

        return LikeResult(article=tentative, committed=True)
