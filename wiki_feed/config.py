"""Configuration for wiki_feed.

Settings come from dataclass defaults, an optional YAML file and finally
environment variables. The YAML file has two sections:

    server:
      log_level: DEBUG
      max_batch_count: 10
    feed:
      api_url: http://127.0.0.1:5000
      prefetch_threshold: 3

The file path is taken from WIKI_FEED_CONFIG when not given explicitly.
"""

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_HOME = Path.home() / ".wiki_feed"


def _default_db_path() -> str:
    return str(DEFAULT_HOME / "wiki_feed.db")


def _default_session_dir() -> str:
    return str(DEFAULT_HOME / "sessions")


@dataclass
class ServerConfig:
    """Backend settings: encyclopedia API access, filtering and storage."""

    name: str = "wiki_feed"
    log_level: str = "INFO"
    db_path: str = field(default_factory=_default_db_path)
    wikipedia_api_url: str = "https://en.wikipedia.org/w/api.php"
    pageviews_api_url: str = (
        "https://wikimedia.org/api/rest_v1/metrics/pageviews/top/en.wikipedia/all-access"
    )
    user_agent: str = "WikiFeed/1.0 (Wikipedia swipe feed)"
    request_timeout: float = 30.0
    max_batch_count: int = 10
    default_batch_count: int = 5
    default_min_extract_length: int = 200
    thumbnail_size: int = 400
    exclude_list_pages: bool = True


@dataclass
class FeedConfig:
    """Client settings for the feed controller and its collaborators."""

    api_url: str = "http://127.0.0.1:5000"
    source: str = "random"
    page_size: int = 10
    prefetch_threshold: int = 3
    wheel_quiet_period: float = 0.1
    cache_key: str = "wiktok_articles_cache"
    session_dir: str = field(default_factory=_default_session_dir)
    require_thumbnail: bool = False
    min_extract_length: int = 200
    request_timeout: float = 30.0


@dataclass
class AppConfig:
    """Root configuration container."""

    server: ServerConfig = field(default_factory=ServerConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)


# Environment variable -> (section, attribute)
ENV_OVERRIDES = {
    "WIKI_FEED_LOG_LEVEL": ("server", "log_level"),
    "WIKI_FEED_DB_PATH": ("server", "db_path"),
    "WIKI_FEED_WIKIPEDIA_API_URL": ("server", "wikipedia_api_url"),
    "WIKI_FEED_USER_AGENT": ("server", "user_agent"),
    "WIKI_FEED_MAX_BATCH_COUNT": ("server", "max_batch_count"),
    "WIKI_FEED_API_URL": ("feed", "api_url"),
    "WIKI_FEED_SOURCE": ("feed", "source"),
    "WIKI_FEED_PAGE_SIZE": ("feed", "page_size"),
    "WIKI_FEED_PREFETCH_THRESHOLD": ("feed", "prefetch_threshold"),
    "WIKI_FEED_SESSION_DIR": ("feed", "session_dir"),
}


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load configuration from a YAML file with defaults and env overrides.

    Args:
        path: Optional YAML file path (falls back to WIKI_FEED_CONFIG)

    Returns:
        Fully populated AppConfig
    """
    path = path or os.environ.get("WIKI_FEED_CONFIG")
    raw: Dict[str, Any] = {}
    if path:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    data = asdict(AppConfig())
    for section in ("server", "feed"):
        values = raw.get(section) or {}
        if isinstance(values, dict):
            data[section].update(
                {k: v for k, v in values.items() if k in data[section]}
            )

    for env_name, (section, attr) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is None or value == "":
            continue
        data[section][attr] = _coerce(value, data[section][attr])

    return AppConfig(
        server=ServerConfig(**data["server"]),
        feed=FeedConfig(**data["feed"]),
    )


def _coerce(value: str, current: Any) -> Any:
    """Convert an env string to the type of the current value.

    Invalid numbers keep the current value.
    """
    if isinstance(current, bool):
        return value.lower() in ("1", "true", "yes")
    if isinstance(current, int):
        try:
            return int(value)
        except ValueError:
            return current
    if isinstance(current, float):
        try:
            return float(value)
        except ValueError:
            return current
    return value


_config: Optional[AppConfig] = None


def get_config() -> ServerConfig:
    """Return the server section of the process-wide configuration."""
    global _config

    if _config is None:
        _config = load_config()
    return _config.server

