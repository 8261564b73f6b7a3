"""Fixtures for integration tests.

The backend runs in-process: HTTP routes through httpx's ASGI transport and
MCP tools through an in-memory client session. Wikipedia is patched at the
service boundary.
"""

import itertools
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from mcp.shared.memory import create_connected_server_and_client_session

from wiki_feed.config import ServerConfig
from wiki_feed.server.app import create_mcp_server
from wiki_feed.storage.database import Database
from tests.conftest import build_article

BASE_URL = "http://testserver"


def extract_text_content(result) -> str:
    """Text of the first content item of a tool result."""
    for item in result.content:
        if item.type == "text":
            return item.text
    raise AssertionError(f"No text content in {result.content}")


def extract_json(result) -> dict:
    return json.loads(extract_text_content(result))


class FakeWikipedia:
    """Stand-ins for the Wikipedia fetchers, handing out fresh page ids."""

    def __init__(self):
        self._ids = itertools.count(1)
        self.random_article = AsyncMock(side_effect=self._random_article)
        self.random_articles = AsyncMock(side_effect=self._random_articles)
        self.trending_articles = AsyncMock(side_effect=self._trending_articles)

    async def _random_article(self, **kwargs):
        return build_article(next(self._ids))

    async def _random_articles(self, count=5, **kwargs):
        return [build_article(next(self._ids)) for _ in range(count)]

    async def _trending_articles(self, count=5, **kwargs):
        return [
            build_article(
                next(self._ids),
                source="trending",
                views=90000 - rank * 1000,
                rank=rank,
            )
            for rank in range(1, count + 1)
        ]


@pytest.fixture
def fake_wikipedia():
    """Patch the catalog's Wikipedia fetchers."""
    fake = FakeWikipedia()
    with patch.multiple(
        "wiki_feed.services.catalog.wikipedia",
        get_random_article=fake.random_article,
        get_random_articles=fake.random_articles,
        get_trending_articles=fake.trending_articles,
    ):
        yield fake


@pytest.fixture
async def database():
    db = Database(":memory:")
    yield db
    await db.close()


@pytest.fixture
def mcp_server(database, fake_wikipedia):
    return create_mcp_server(ServerConfig(db_path=":memory:"), database)


@pytest.fixture
async def http_client(mcp_server):
    """HTTP client bound to the server's Starlette app."""
    transport = httpx.ASGITransport(app=mcp_server.streamable_http_app())
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
        yield client


@pytest.fixture
async def mcp_session(mcp_server):
    """MCP client session connected to the server in memory."""
    async with create_connected_server_and_client_session(mcp_server._mcp_server) as session:
        yield session
