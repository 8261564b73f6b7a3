"""Data models for wiki_feed.

This module defines the article value shared by the backend and the feed
controller, along with its JSON wire form (camelCase keys).
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Literal, Optional

ArticleOrigin = Literal["random", "trending"]

_ORIGINS = ("random", "trending")


@dataclass(frozen=True)
class Article:
    """A single encyclopedia article as shown in the feed."""

    id: int
    title: str
    extract: str
    thumbnail: Optional[str]
    url: str
    source: ArticleOrigin = "random"
    views: Optional[int] = None
    rank: Optional[int] = None
    is_liked: Optional[bool] = None

    def with_liked(self, is_liked: bool) -> "Article":
        """Return a copy with the like flag set."""
        return replace(self, is_liked=is_liked)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON wire form.

        Optional trending fields and the like flag are omitted when unset.
        """
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "extract": self.extract,
            "thumbnail": self.thumbnail,
            "url": self.url,
            "source": self.source,
        }
        if self.views is not None:
            data["views"] = self.views
        if self.rank is not None:
            data["rank"] = self.rank
        if self.is_liked is not None:
            data["isLiked"] = self.is_liked
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Article":
        """Build an Article from its JSON wire form.

        Raises:
            ValueError: If a required field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"Article payload must be an object, got {type(data).__name__}")

        try:
            article_id = data["id"]
            title = data["title"]
            url = data["url"]
        except KeyError as e:
            raise ValueError(f"Article payload missing field {e}") from e

        if isinstance(article_id, bool) or not isinstance(article_id, int):
            raise ValueError(f"Article id must be an integer, got {article_id!r}")
        if not isinstance(title, str) or not isinstance(url, str):
            raise ValueError("Article title and url must be strings")

        source = data.get("source") or "random"
        if source not in _ORIGINS:
            raise ValueError(f"Unknown article source: {source!r}")

        extract = data.get("extract") or ""
        thumbnail = data.get("thumbnail") or None
        if not isinstance(extract, str) or not (thumbnail is None or isinstance(thumbnail, str)):
            raise ValueError("Article extract and thumbnail must be strings")

        views = _optional_int(data, "views")
        rank = _optional_int(data, "rank")
        is_liked = data.get("isLiked")

        return cls(
            id=article_id,
            title=title,
            extract=extract,
            thumbnail=thumbnail,
            url=url,
            source=source,
            views=views,
            rank=rank,
            is_liked=bool(is_liked) if is_liked is not None else None,
        )


def _optional_int(data: Dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Article {key} must be an integer, got {value!r}")
    return value
