"""Wikipedia article service.

This module fetches random and trending articles from the Wikipedia API and
the Wikimedia pageviews API.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from wiki_feed.config import ServerConfig, get_config
from wiki_feed.errors import NetworkError, UpstreamError
from wiki_feed.models.schemas import Article
from wiki_feed.services.quality import passes_quality_filter

logger = logging.getLogger(__name__)

# Attempts for a single article that passes the filter
MAX_SINGLE_ATTEMPTS = 10
# Attempts per requested article in a batch
BATCH_ATTEMPT_FACTOR = 3
# Titles per Wikipedia query (API limit)
MAX_TITLES_PER_QUERY = 50

NON_ARTICLE_PREFIXES = (
    "Special:",
    "Wikipedia:",
    "File:",
    "Portal:",
    "Help:",
    "Category:",
    "Template:",
    "Talk:",
    "User:",
)
NON_ARTICLE_TITLES = {"Main_Page", "Main Page", "-"}


def _open_client(config: ServerConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=config.request_timeout,
        headers={"User-Agent": config.user_agent},
    )


async def _get_json(
    client: httpx.AsyncClient,
    url: str,
    params: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """GET a JSON object, mapping failures onto the error taxonomy.

    Raises:
        NetworkError: On transport failure
        UpstreamError: On non-success status or a non-object payload
    """
    try:
        response = await client.get(url, params=params)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise UpstreamError(f"HTTP error {e.response.status_code} from {url}") from e
    except httpx.HTTPError as e:
        raise NetworkError(f"Failed to reach {url}: {e}") from e

    try:
        data = response.json()
    except ValueError as e:
        raise UpstreamError(f"Malformed JSON from {url}") from e

    if not isinstance(data, dict):
        raise UpstreamError(f"Unexpected payload from {url}")
    return data


def _content_params(config: ServerConfig) -> Dict[str, Any]:
    return {
        "action": "query",
        "format": "json",
        "prop": "extracts|pageimages|info",
        "explaintext": 1,
        "exintro": 1,
        "piprop": "thumbnail",
        "pithumbsize": config.thumbnail_size,
        "inprop": "url",
    }


def _page_to_article(page: Dict[str, Any], **extra: Any) -> Article:
    """Convert a Wikipedia page object to an Article."""
    title = page.get("title", "")
    thumbnail = (page.get("thumbnail") or {}).get("source")
    url = page.get("fullurl") or (
        f"https://en.wikipedia.org/wiki/{quote(title.replace(' ', '_'))}"
    )
    return Article(
        id=int(page["pageid"]),
        title=title,
        extract=page.get("extract") or "No extract available",
        thumbnail=thumbnail,
        url=url,
        **extra,
    )


async def _fetch_random_article(
    client: httpx.AsyncClient,
    config: ServerConfig,
) -> Article:
    """One random main-namespace article, unfiltered."""
    data = await _get_json(
        client,
        config.wikipedia_api_url,
        {
            "action": "query",
            "format": "json",
            "list": "random",
            "rnnamespace": 0,
            "rnlimit": 1,
        },
    )
    random_pages = (data.get("query") or {}).get("random") or []
    if not random_pages:
        raise UpstreamError("Failed to get random article")

    params = _content_params(config)
    params["pageids"] = random_pages[0]["id"]
    data = await _get_json(client, config.wikipedia_api_url, params)

    pages = (data.get("query") or {}).get("pages") or {}
    if not pages:
        raise UpstreamError("Failed to get article content")

    page = next(iter(pages.values()))
    if "pageid" not in page:
        raise UpstreamError("Failed to get article content")
    return _page_to_article(page)


async def get_random_article(
    require_thumbnail: bool = False,
    min_extract_length: int = 200,
    config: Optional[ServerConfig] = None,
) -> Article:
    """Get a random article that passes the quality filter.

    Args:
        require_thumbnail: Only accept articles with an image
        min_extract_length: Minimum extract length in characters
        config: Optional server configuration

    Returns:
        The first accepted Article

    Raises:
        UpstreamError: If no acceptable article was found within the attempt budget
        NetworkError: If Wikipedia cannot be reached
    """
    if config is None:
        config = get_config()

    async with _open_client(config) as client:
        for attempt in range(1, MAX_SINGLE_ATTEMPTS + 1):
            article = await _fetch_random_article(client, config)
            if passes_quality_filter(
                article,
                require_thumbnail=require_thumbnail,
                min_extract_length=min_extract_length,
                exclude_list_pages=config.exclude_list_pages,
            ):
                return article
            logger.debug(f"Skipping article '{article.title}' (attempt {attempt})")

    raise UpstreamError(
        f"Failed to find a suitable article after {MAX_SINGLE_ATTEMPTS} attempts"
    )


async def get_random_articles(
    count: int = 5,
    require_thumbnail: bool = False,
    min_extract_length: int = 200,
    config: Optional[ServerConfig] = None,
) -> List[Article]:
    """Get up to ``count`` distinct random articles that pass the filter.

    Individual fetch failures are logged and skipped. Fewer than ``count``
    articles are returned when the attempt budget runs out.

    Args:
        count: Number of articles wanted
        require_thumbnail: Only accept articles with an image
        min_extract_length: Minimum extract length in characters
        config: Optional server configuration

    Returns:
        Accepted articles in discovery order
    """
    if config is None:
        config = get_config()

    articles: List[Article] = []
    seen_ids = set()
    max_attempts = count * BATCH_ATTEMPT_FACTOR
    attempts = 0

    async with _open_client(config) as client:
        while len(articles) < count and attempts < max_attempts:
            attempts += 1
            try:
                article = await _fetch_random_article(client, config)
            except (NetworkError, UpstreamError) as e:
                logger.warning(f"Error fetching an article, continuing to next: {e}")
                continue

            if article.id in seen_ids:
                continue
            if not passes_quality_filter(
                article,
                require_thumbnail=require_thumbnail,
                min_extract_length=min_extract_length,
                exclude_list_pages=config.exclude_list_pages,
            ):
                logger.debug(f"Skipping article '{article.title}'")
                continue

            seen_ids.add(article.id)
            articles.append(article)

    if len(articles) < count:
        logger.warning(
            f"Could only find {len(articles)} articles out of {count} requested"
        )
    return articles


def _is_article_title(title: str) -> bool:
    if title in NON_ARTICLE_TITLES:
        return False
    return not title.startswith(NON_ARTICLE_PREFIXES)


async def _fetch_top_pageviews(
    client: httpx.AsyncClient,
    config: ServerConfig,
    day: date,
) -> List[Dict[str, Any]]:
    url = f"{config.pageviews_api_url}/{day.year}/{day.month:02d}/{day.day:02d}"
    data = await _get_json(client, url)
    items = data.get("items") or []
    if not items:
        return []
    return items[0].get("articles") or []


async def get_trending_articles(
    count: int = 5,
    config: Optional[ServerConfig] = None,
    today: Optional[date] = None,
) -> List[Article]:
    """Get the most viewed articles of the latest complete day.

    Uses yesterday's (UTC) pageview ranking, falling back one more day when
    it is not published yet.

    Args:
        count: Number of articles wanted
        config: Optional server configuration
        today: Override for the current UTC date

    Returns:
        Articles tagged ``source="trending"`` with views and rank, in rank order
    """
    if config is None:
        config = get_config()
    if today is None:
        today = datetime.now(timezone.utc).date()

    async with _open_client(config) as client:
        ranking: List[Dict[str, Any]] = []
        for days_back in (1, 2):
            day = today - timedelta(days=days_back)
            try:
                ranking = await _fetch_top_pageviews(client, config, day)
            except UpstreamError as e:
                logger.warning(f"No pageview ranking for {day.isoformat()}: {e}")
                continue
            if ranking:
                break

        if not ranking:
            raise UpstreamError("Failed to get trending articles")

        candidates = [
            row for row in ranking
            if isinstance(row.get("article"), str) and _is_article_title(row["article"])
        ][: min(count * BATCH_ATTEMPT_FACTOR, MAX_TITLES_PER_QUERY)]
        if not candidates:
            return []

        params = _content_params(config)
        params["titles"] = "|".join(row["article"].replace("_", " ") for row in candidates)
        params["redirects"] = 1
        data = await _get_json(client, config.wikipedia_api_url, params)

    query = data.get("query") or {}
    # Map requested titles to the titles Wikipedia resolved them to
    resolved: Dict[str, str] = {}
    for entry in (query.get("normalized") or []) + (query.get("redirects") or []):
        resolved[entry["from"]] = entry["to"]

    pages_by_title = {
        page.get("title"): page
        for page in (query.get("pages") or {}).values()
        if "pageid" in page and "missing" not in page
    }

    articles: List[Article] = []
    seen_ids = set()
    for row in candidates:
        title = row["article"].replace("_", " ")
        # normalized, then redirected
        for _ in range(2):
            title = resolved.get(title, title)
        page = pages_by_title.get(title)
        if page is None:
            continue

        article = _page_to_article(
            page,
            source="trending",
            views=int(row.get("views") or 0),
            rank=int(row.get("rank") or 0),
        )
        if article.id in seen_ids:
            continue
        if not passes_quality_filter(article, exclude_list_pages=config.exclude_list_pages):
            continue

        seen_ids.add(article.id)
        articles.append(article)
        if len(articles) >= count:
            break

    return articles
