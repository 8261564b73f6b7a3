"""Article source backed by the wiki_feed HTTP API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from wiki_feed.errors import NetworkError, UpstreamError
from wiki_feed.models.schemas import Article

logger = logging.getLogger(__name__)

USER_AGENT = "WikiFeed/1.0 (Feed client)"


class HttpArticleSource:
    """Fetch pages of articles from ``GET /api/articles``.

    Quality filtering is part of the backend contract; this source only
    forwards the filter settings.

    Args:
        base_url: Backend root, e.g. http://127.0.0.1:5000
        source: "random" or "trending"
        require_thumbnail: Ask the backend for articles with an image only
        min_extract_length: Minimum extract length for random articles
        timeout: Request timeout in seconds
        client: Optional shared client (one is opened per fetch otherwise)
    """

    def __init__(
        self,
        base_url: str,
        source: str = "random",
        require_thumbnail: bool = False,
        min_extract_length: int = 200,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.source = source
        self.require_thumbnail = require_thumbnail
        self.min_extract_length = min_extract_length
        self.timeout = timeout
        self._client = client

    def toggle_source(self) -> str:
        """Switch between random and trending; returns the new source."""
        self.source = "trending" if self.source == "random" else "random"
        logger.info(f"Article source switched to {self.source}")
        return self.source

    def _params(self, count: int) -> Dict[str, Any]:
        params: Dict[str, Any] = {"source": self.source, "count": count}
        if self.source == "random":
            params["minExtractLength"] = self.min_extract_length
            if self.require_thumbnail:
                params["requireThumbnail"] = "true"
        return params

    async def fetch(self, count: int) -> List[Article]:
        """Fetch one page of articles, in display order.

        Raises:
            NetworkError: If the backend cannot be reached
            UpstreamError: On a non-success status or malformed payload
        """
        url = f"{self.base_url}/api/articles"
        params = self._params(count)

        try:
            if self._client is not None:
                response = await self._client.get(
                    url,
                    params=params,
                    headers={"User-Agent": USER_AGENT},
                    timeout=self.timeout,
                )
            else:
                async with httpx.AsyncClient(
                    timeout=self.timeout,
                    headers={"User-Agent": USER_AGENT},
                ) as client:
                    response = await client.get(url, params=params)
        except httpx.RequestError as e:
            raise NetworkError(f"Network error: {e}") from e

        if response.is_error:
            raise UpstreamError(f"HTTP error {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("Malformed article payload") from e

        if not isinstance(data, list):
            raise UpstreamError("Malformed article payload")

        try:
            articles = [Article.from_dict(item) for item in data]
        except ValueError as e:
            raise UpstreamError(f"Malformed article payload: {e}") from e

        logger.debug(f"Fetched {len(articles)} articles from {url}")
        return articles
