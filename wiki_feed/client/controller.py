"""Feed controller.

Owns the ordered article sequence, the cursor, and the fetch scheduling
around them. All mutation happens on the event loop thread; the only
suspension point is the article source fetch.
"""

import asyncio
import enum
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Protocol, Sequence, Tuple

from wiki_feed.client.events import Intent
from wiki_feed.client.window import render_window
from wiki_feed.models.schemas import Article

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
DEFAULT_PREFETCH_THRESHOLD = 3


class ArticleSource(Protocol):
    async def fetch(self, count: int) -> List[Article]: ...


class FeedCache(Protocol):
    def load(self) -> Optional[List[Article]]: ...

    def save(self, items: Sequence[Article]) -> None: ...

    def clear(self) -> None: ...


class FeedPhase(enum.Enum):
    EMPTY = "empty"
    LOADING_INITIAL = "loading_initial"
    LOADING_MORE = "loading_more"
    READY = "ready"
    ERROR = "error"


class FeedController:
    """Cursor, pagination and prefetch state for one browsing session.

    Args:
        source: Article source used to fetch pages
        cache: Optional session cache; the feed works fully without one
        page_size: Number of articles requested per fetch
        prefetch_threshold: Remaining-items count that triggers the next fetch
    """

    def __init__(
        self,
        source: ArticleSource,
        cache: Optional[FeedCache] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        prefetch_threshold: int = DEFAULT_PREFETCH_THRESHOLD,
    ):
        self._source = source
        self._cache = cache
        self.page_size = page_size
        self.prefetch_threshold = prefetch_threshold

        self._items: List[Article] = []
        self.cursor = 0
        self.loading = False
        self.error: Optional[str] = None
        self.is_initial_load = True
        self._fetch_in_flight = False
        self._prefetch_task: Optional[asyncio.Task] = None
        # Bumped by reset(); pages fetched for an older feed are dropped
        self._generation = 0

    # --- State ---

    @property
    def items(self) -> Tuple[Article, ...]:
        return tuple(self._items)

    @property
    def fetch_in_flight(self) -> bool:
        return self._fetch_in_flight

    @property
    def pending_prefetch(self) -> Optional[asyncio.Task]:
        """The scheduled prefetch task, if it has not finished."""
        task = self._prefetch_task
        if task is None or task.done():
            return None
        return task

    @property
    def current(self) -> Optional[Article]:
        if not self._items:
            return None
        return self._items[self.cursor]

    @property
    def has_next(self) -> bool:
        return self.cursor < len(self._items) - 1

    @property
    def has_previous(self) -> bool:
        return self.cursor > 0

    @property
    def window(self) -> List[Tuple[int, Article]]:
        """(index, article) pairs inside the render window."""
        return [(i, self._items[i]) for i in render_window(self.cursor, len(self._items))]

    @property
    def phase(self) -> FeedPhase:
        if self.loading:
            return FeedPhase.LOADING_INITIAL if self.is_initial_load else FeedPhase.LOADING_MORE
        if self.error is not None:
            return FeedPhase.ERROR
        if not self._items:
            return FeedPhase.EMPTY
        return FeedPhase.READY

    @property
    def shows_fullscreen_error(self) -> bool:
        """Only an initial failure with nothing to show replaces the feed."""
        return self.error is not None and not self._items

    # --- Operations ---

    async def initialize(self) -> None:
        """Restore the cached feed, or fetch the first page."""
        restored = self._cache.load() if self._cache is not None else None
        if restored:
            self._items = list(restored)
            self.cursor = 0
            self.is_initial_load = False
            self.loading = False
            logger.info(f"Restored {len(self._items)} articles from session cache")
            return

        await self.fetch_more()

    async def fetch_more(self) -> None:
        """Fetch one page and append it to the feed.

        A no-op while another fetch is in flight. A failed fetch records
        ``error`` and leaves ``items`` untouched.
        """
        if self._fetch_in_flight:
            logger.debug("Fetch already in flight, skipping")
            return

        generation = self._generation
        with self._fetching(generation):
            try:
                page = await self._source.fetch(self.page_size)
            except Exception as e:
                if generation == self._generation:
                    self.error = str(e) or "An unknown error occurred"
                    logger.warning(f"Failed to fetch articles: {self.error}")
                return

            if generation != self._generation:
                logger.info(f"Dropping {len(page)} articles fetched before the feed was reset")
                return

            self._items.extend(page)
            self.is_initial_load = False
            logger.info(f"Fetched {len(page)} new articles ({len(self._items)} total)")

        self._save_cache()
        if page:
            self._maybe_prefetch()

    async def retry(self) -> None:
        """User-initiated retry after a failed fetch."""
        await self.fetch_more()

    async def reset(self) -> None:
        """Drop the feed and the cached copy, then fetch a fresh first page.

        Used after the article source changes. A fetch still in flight for
        the old feed is discarded when it resolves.
        """
        self._generation += 1
        task = self.pending_prefetch
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        self._prefetch_task = None

        self._items = []
        self.cursor = 0
        self.loading = False
        self.error = None
        self.is_initial_load = True
        self._fetch_in_flight = False
        if self._cache is not None:
            self._cache.clear()
        logger.info("Feed reset")

        await self.fetch_more()

    def advance(self, direction: Intent) -> bool:
        """Move the cursor one step.

        Returns:
            True if the cursor moved, False at either bound
        """
        if direction is Intent.NEXT:
            if not self.has_next:
                return False
            self.cursor += 1
        elif direction is Intent.PREVIOUS:
            if not self.has_previous:
                return False
            self.cursor -= 1
        else:
            raise ValueError(f"Unknown direction: {direction!r}")

        self._maybe_prefetch()
        return True

    def replace_article(self, article: Article) -> bool:
        """Swap in an updated value for an article already in the feed.

        Used for like toggles; order and length are unchanged.
        """
        for index, existing in enumerate(self._items):
            if existing.id == article.id:
                self._items[index] = article
                self._save_cache()
                return True
        return False

    async def wait_idle(self) -> None:
        """Wait until no scheduled prefetch is pending, including chained ones."""
        while self._prefetch_task is not None and not self._prefetch_task.done():
            await self._prefetch_task

    # --- Internals ---

    @contextmanager
    def _fetching(self, generation: int) -> Iterator[None]:
        self._fetch_in_flight = True
        self.loading = True
        self.error = None
        try:
            yield
        finally:
            # A reset during the fetch already owns the flags
            if generation == self._generation:
                self.loading = False
                self._fetch_in_flight = False

    def _should_prefetch(self) -> bool:
        if not self._items or self._fetch_in_flight:
            return False
        task = self._prefetch_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            return False
        # Suspended after a failure until the user retries
        if self.error is not None:
            return False
        return len(self._items) - self.cursor <= self.prefetch_threshold

    def _maybe_prefetch(self) -> None:
        if not self._should_prefetch():
            return
        logger.debug(f"Prefetch triggered at cursor {self.cursor}/{len(self._items)}")
        self._prefetch_task = asyncio.get_running_loop().create_task(self.fetch_more())

    def _save_cache(self) -> None:
        if self._cache is not None and self._items:
            self._cache.save(self._items)
