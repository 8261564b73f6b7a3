"""Shared test fixtures for wiki_feed tests."""

import asyncio
from typing import List, Optional

import pytest

from wiki_feed.errors import UpstreamError
from wiki_feed.models.schemas import Article


def build_article(article_id: int, **overrides) -> Article:
    """Article with plausible defaults."""
    values = {
        "id": article_id,
        "title": f"Article {article_id}",
        "extract": f"Extract for article {article_id}. " * 12,
        "thumbnail": f"https://upload.wikimedia.org/thumb/{article_id}.jpg",
        "url": f"https://en.wikipedia.org/wiki/Article_{article_id}",
    }
    values.update(overrides)
    return Article(**values)


class ScriptedSource:
    """Article source that replays a script of pages and failures.

    Each entry is a list of articles (a successful page) or an exception
    instance (a failed fetch). Once the script runs out, fetches fail.
    When ``gate`` is set, every fetch waits on it before answering.
    """

    def __init__(self, script: Optional[list] = None, gate: Optional[asyncio.Event] = None):
        self.script = list(script or [])
        self.gate = gate
        self.calls: List[int] = []

    async def fetch(self, count: int) -> List[Article]:
        self.calls.append(count)
        if self.gate is not None:
            await self.gate.wait()
        if not self.script:
            raise UpstreamError("HTTP error 500")
        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        return list(step)


@pytest.fixture
def article_factory():
    """Factory for Article values."""
    return build_article


@pytest.fixture
def scripted_source():
    """Factory for scripted article sources."""
    return ScriptedSource


@pytest.fixture
def anyio_backend():
    return "asyncio"
