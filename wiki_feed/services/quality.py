"""Quality filter for encyclopedia articles."""

import re

from wiki_feed.models.schemas import Article

_LIST_TITLE_RE = re.compile(r"^(list|lists|index|outline) of ", re.IGNORECASE)
_DISAMBIGUATION_MARKERS = ("may refer to", "may also refer to")


def is_list_page(article: Article) -> bool:
    return bool(_LIST_TITLE_RE.match(article.title))


def is_disambiguation_page(article: Article) -> bool:
    if article.title.endswith("(disambiguation)"):
        return True
    head = article.extract[:300].lower()
    return any(marker in head for marker in _DISAMBIGUATION_MARKERS)


def passes_quality_filter(
    article: Article,
    require_thumbnail: bool = False,
    min_extract_length: int = 0,
    exclude_list_pages: bool = True,
) -> bool:
    """Check an article against the feed's quality bar.

    Args:
        article: Candidate article
        require_thumbnail: Reject articles without an image
        min_extract_length: Reject extracts shorter than this many characters
        exclude_list_pages: Reject list and disambiguation pages

    Returns:
        True if the article may be shown
    """
    if require_thumbnail and not article.thumbnail:
        return False
    if len(article.extract.strip()) < min_extract_length:
        return False
    if exclude_list_pages and (is_list_page(article) or is_disambiguation_page(article)):
        return False
    return True
