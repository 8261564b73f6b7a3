"""Unit tests for optimistic like toggling."""

import asyncio

import httpx
import pytest

from wiki_feed.client.likes import HttpLikeClient, LikeToggle
from wiki_feed.errors import PersistenceError
from tests.conftest import build_article


# Mark all tests as async
pytestmark = pytest.mark.anyio


class FakeLikeClient:
    """Like client that records calls and can fail or block."""

    def __init__(self, fail=False, gate=None):
        self.fail = fail
        self.gate = gate
        self.calls = []

    async def set_liked(self, article_id, liked):
        self.calls.append((article_id, liked))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise PersistenceError("Failed to update like: HTTP error 500")


class TestLikeToggle:
    """Tests for the tentative/commit/rollback transitions."""

    async def test_commit(self):
        """Test that a confirmed toggle keeps the flipped flag."""
        applied = []
        client = FakeLikeClient()
        toggle = LikeToggle(client, applied.append)
        article = build_article(3)

        result = await toggle.toggle(article)

        assert result.committed is True
        assert result.error is None
        assert result.article.is_liked is True
        assert client.calls == [(3, True)]
        assert [a.is_liked for a in applied] == [True]

    async def test_unlike(self):
        client = FakeLikeClient()
        toggle = LikeToggle(client, lambda article: None)

        result = await toggle.toggle(build_article(3, is_liked=True))

        assert result.article.is_liked is False
        assert client.calls == [(3, False)]

    async def test_rollback_on_failure(self):
        """Test that a failed request restores the original article."""
        applied = []
        toggle = LikeToggle(FakeLikeClient(fail=True), applied.append)
        article = build_article(3)

        result = await toggle.toggle(article)

        assert result.committed is False
        assert result.article == article
        assert "HTTP error 500" in result.error
        assert [a.is_liked for a in applied] == [True, None]
        assert toggle.is_pending(3) is False

    async def test_toggle_ignored_while_pending(self):
        """Test that a second toggle during a pending request is a no-op."""
        gate = asyncio.Event()
        client = FakeLikeClient(gate=gate)
        toggle = LikeToggle(client, lambda article: None)
        article = build_article(3)

        first = asyncio.create_task(toggle.toggle(article))
        await asyncio.sleep(0)
        assert toggle.is_pending(3) is True

        second = await toggle.toggle(article)
        assert second.committed is False
        assert second.error is None

        gate.set()
        result = await first

        assert result.committed is True
        assert client.calls == [(3, True)]
        assert toggle.is_pending(3) is False


class TestHttpLikeClient:
    """Tests for the like endpoints client."""

    async def test_methods_and_path(self):
        """Test POST for like and DELETE for unlike."""
        requests = []

        def handler(request):
            requests.append((request.method, request.url.path))
            return httpx.Response(200, json={"success": True})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = HttpLikeClient("http://feed.test/", client=http)
            await client.set_liked(42, True)
            await client.set_liked(42, False)

        assert requests == [
            ("POST", "/api/articles/42/like"),
            ("DELETE", "/api/articles/42/like"),
        ]

    async def test_error_status(self):
        def handler(request):
            return httpx.Response(500, json={"error": "Failed to like article"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = HttpLikeClient("http://feed.test", client=http)
            with pytest.raises(PersistenceError, match="HTTP error 500"):
                await client.set_liked(1, True)

    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = HttpLikeClient("http://feed.test", client=http)
            with pytest.raises(PersistenceError):
                await client.set_liked(1, False)
