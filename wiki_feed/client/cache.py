"""Session cache for the feed.

A best-effort, session-scoped copy of the article sequence so a reload can
resume without a network call. The backing store is any string key-value
mapping; failures are logged and never reach the feed controller.
"""

import json
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Dict, Iterator, List, MutableMapping, Optional, Sequence

from wiki_feed.errors import CacheError
from wiki_feed.models.schemas import Article

logger = logging.getLogger(__name__)

DEFAULT_CACHE_KEY = "wiktok_articles_cache"


class SessionCache:
    """Load and save the feed as a JSON array under a fixed key.

    Args:
        store: String key-value store (an in-memory dict when omitted)
        key: Key the serialized feed is kept under
    """

    def __init__(
        self,
        store: Optional[MutableMapping[str, str]] = None,
        key: str = DEFAULT_CACHE_KEY,
    ):
        self.store = store if store is not None else {}
        self.key = key

    def load(self) -> Optional[List[Article]]:
        """Return the cached feed, or None if absent or unreadable."""
        try:
            raw = self.store.get(self.key)
        except CacheError as e:
            logger.warning(f"Error loading from cache: {e}")
            return None

        if raw is None:
            return None

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("cached feed is not a JSON array")
            articles = [Article.from_dict(item) for item in data]
        except ValueError as e:
            logger.warning(f"Discarding malformed cache entry: {e}")
            return None

        logger.info(f"Loaded {len(articles)} articles from cache")
        return articles

    def save(self, items: Sequence[Article]) -> None:
        """Store the full feed. Failures are logged and swallowed."""
        try:
            self.store[self.key] = json.dumps([a.to_dict() for a in items])
        except (CacheError, TypeError, ValueError) as e:
            logger.warning(f"Error saving to cache: {e}")

    def clear(self) -> None:
        try:
            self.store.pop(self.key, None)
        except CacheError as e:
            logger.warning(f"Error clearing cache: {e}")


class FileSessionStore(MutableMapping[str, str]):
    """String key-value store persisted as one JSON file per session.

    Args:
        directory: Directory holding session files
        session_id: Session identifier (a fresh one when omitted)

    Raises:
        CacheError: From any operation when the file cannot be read or written
    """

    def __init__(self, directory: str, session_id: Optional[str] = None):
        self.directory = Path(directory).expanduser()
        self.session_id = session_id or uuid.uuid4().hex
        self.path = self.directory / f"{self.session_id}.json"

    def _read(self) -> Dict[str, str]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            raise CacheError(f"Cannot read session file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise CacheError(f"Session file {self.path} is not a JSON object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        tmp_path = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise CacheError(f"Cannot write session file {self.path}: {e}") from e

    def __getitem__(self, key: str) -> str:
        return self._read()[key]

    def __setitem__(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def __delitem__(self, key: str) -> None:
        data = self._read()
        del data[key]
        self._write(data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._read())

    def __len__(self) -> int:
        return len(self._read())
