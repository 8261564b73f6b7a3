"""Unit tests for the HTTP article source."""

import httpx
import pytest

from wiki_feed.client.source import USER_AGENT, HttpArticleSource
from wiki_feed.errors import NetworkError, UpstreamError
from tests.conftest import build_article


# Mark all tests as async
pytestmark = pytest.mark.anyio


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestHttpArticleSource:
    """Tests for fetching pages from /api/articles."""

    async def test_fetch_random_page(self):
        """Test the request parameters and the decoded page order."""
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["user_agent"] = request.headers.get("user-agent")
            payload = [build_article(i).to_dict() for i in (4, 2, 9)]
            return httpx.Response(200, json=payload)

        async with mock_client(handler) as http:
            source = HttpArticleSource(
                "http://feed.test/",
                require_thumbnail=True,
                min_extract_length=150,
                client=http,
            )
            articles = await source.fetch(10)

        assert [a.id for a in articles] == [4, 2, 9]
        assert seen["path"] == "/api/articles"
        assert seen["params"] == {
            "source": "random",
            "count": "10",
            "minExtractLength": "150",
            "requireThumbnail": "true",
        }
        assert seen["user_agent"] == USER_AGENT

    async def test_trending_params(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            article = build_article(1, source="trending", views=50000, rank=1)
            return httpx.Response(200, json=[article.to_dict()])

        async with mock_client(handler) as http:
            source = HttpArticleSource("http://feed.test", source="trending", client=http)
            articles = await source.fetch(5)

        assert seen["params"] == {"source": "trending", "count": "5"}
        assert articles[0].views == 50000
        assert articles[0].rank == 1

    async def test_error_status(self):
        """Test that a non-success status becomes an upstream error."""

        def handler(request):
            return httpx.Response(500, json={"error": "Failed to fetch articles"})

        async with mock_client(handler) as http:
            source = HttpArticleSource("http://feed.test", client=http)
            with pytest.raises(UpstreamError) as exc_info:
                await source.fetch(10)

        assert str(exc_info.value) == "HTTP error 500"

    async def test_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with mock_client(handler) as http:
            source = HttpArticleSource("http://feed.test", client=http)
            with pytest.raises(NetworkError, match="Network error"):
                await source.fetch(10)

    @pytest.mark.parametrize(
        "failure",
        [
            lambda request: httpx.TooManyRedirects("Exceeded maximum allowed redirects", request=request),
            lambda request: httpx.DecodingError("Malformed gzip body", request=request),
            lambda request: httpx.ReadTimeout("timed out", request=request),
        ],
    )
    async def test_request_errors_are_network_errors(self, failure):
        """Test that every request-level failure maps to NetworkError."""

        def handler(request):
            raise failure(request)

        async with mock_client(handler) as http:
            source = HttpArticleSource("http://feed.test", client=http)
            with pytest.raises(NetworkError):
                await source.fetch(10)

    async def test_toggle_source(self):
        source = HttpArticleSource("http://feed.test")

        assert source.toggle_source() == "trending"
        assert source.source == "trending"
        assert source.toggle_source() == "random"

    @pytest.mark.parametrize(
        "payload",
        [
            {"articles": []},
            [{"id": "seven", "title": "Bad", "url": "u"}],
            [{"title": "Missing id"}],
        ],
    )
    async def test_malformed_payload(self, payload):
        def handler(request):
            return httpx.Response(200, json=payload)

        async with mock_client(handler) as http:
            source = HttpArticleSource("http://feed.test", client=http)
            with pytest.raises(UpstreamError, match="Malformed"):
                await source.fetch(10)

    async def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>")

        async with mock_client(handler) as http:
            source = HttpArticleSource("http://feed.test", client=http)
            with pytest.raises(UpstreamError):
                await source.fetch(10)
