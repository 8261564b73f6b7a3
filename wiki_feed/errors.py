"""Error taxonomy for wiki_feed.

Fetch errors (NetworkError, UpstreamError) are reported through the feed
controller's error state. CacheError never leaves the session cache boundary.
PersistenceError is raised by like persistence and is always recoverable.
"""


class WikiFeedError(Exception):
    """Base class for all wiki_feed errors."""


class NetworkError(WikiFeedError):
    """Raised when the article source cannot be reached."""


class UpstreamError(WikiFeedError):
    """Raised on a non-success status or a malformed payload from upstream."""


class CacheError(WikiFeedError):
    """Raised when the session store cannot be read or written."""


class PersistenceError(WikiFeedError):
    """Raised when a like cannot be persisted."""


class ArticleNotFoundError(PersistenceError):
    """Raised when liking an article that was never stored."""

    def __init__(self, article_id: int):
        super().__init__(f"Article with ID {article_id} not found")
        self.article_id = article_id
