"""Unit tests for the terminal front end."""

import asyncio
import time
from unittest.mock import patch

import pytest

from wiki_feed.client.cache import SessionCache
from wiki_feed.client.controller import FeedController
from wiki_feed.client.events import Intent
from wiki_feed.client.likes import LikeToggle
from wiki_feed.client.terminal import render_screen, run_browser
from wiki_feed.errors import UpstreamError
from tests.conftest import ScriptedSource, build_article


# Mark all tests as async
pytestmark = pytest.mark.anyio


class RecordingLikeClient:
    def __init__(self):
        self.calls = []

    async def set_liked(self, article_id, liked):
        self.calls.append((article_id, liked))


def scripted_keys(*keys):
    """read_key replacement returning the given keys in order."""
    remaining = iter(keys)
    return lambda: next(remaining, "q")


def page(*ids, **overrides):
    return [build_article(i, **overrides) for i in ids]


class Screens:
    """Collects every frame written by the browser."""

    def __init__(self):
        self.frames = []

    def echo(self, message=None, *args, **kwargs):
        self.frames.append(str(message))

    def wait_for(self, text, timeout=5.0):
        """Block the calling thread until a frame contains ``text``."""
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if any(text in frame for frame in self.frames):
                return True
            time.sleep(0.01)
        return False


class ToggleSource(ScriptedSource):
    """Scripted source that also records the random/trending switch."""

    def __init__(self, script):
        super().__init__(script)
        self.source = "random"

    def toggle_source(self):
        self.source = "trending" if self.source == "random" else "random"
        return self.source


@pytest.fixture
def screens():
    recorder = Screens()
    with patch("wiki_feed.client.terminal.click.echo", recorder.echo):
        yield recorder


class TestRenderScreen:
    """Tests for the text rendering of each feed state."""

    async def test_initial_loading(self):
        gate = asyncio.Event()
        controller = FeedController(ScriptedSource([page(1)], gate=gate))

        task = asyncio.create_task(controller.fetch_more())
        await asyncio.sleep(0)
        assert "Loading articles..." in render_screen(controller)

        gate.set()
        await task

    async def test_fullscreen_error(self):
        controller = FeedController(ScriptedSource([UpstreamError("HTTP error 500")]))
        await controller.initialize()

        screen = render_screen(controller)

        assert "Error\nHTTP error 500" in screen
        assert "[r] Try Again" in screen

    async def test_card(self):
        """Test the card for the current article and its position."""
        controller = FeedController(
            ScriptedSource([page(1, 2, 3, 4, 5, 6, 7, 8, 9, 10, extract="word " * 200)])
        )
        await controller.initialize()
        controller.advance(Intent.NEXT)

        screen = render_screen(controller)

        assert screen.startswith("WikTok  2/10")
        assert "Article 2" in screen
        assert "https://en.wikipedia.org/wiki/Article_2" in screen
        assert "..." in screen

        expanded = render_screen(controller, expanded=True)
        assert len(expanded) > len(screen)

    async def test_trending_and_liked_markers(self):
        article = build_article(1, source="trending", views=123456, rank=2, is_liked=True)
        controller = FeedController(ScriptedSource([[article]]), prefetch_threshold=0)
        await controller.fetch_more()

        screen = render_screen(controller)

        assert "Article 1  ♥" in screen
        assert "Trending #2 (123,456 views)" in screen

    async def test_error_below_existing_feed(self):
        """Test that a failed page keeps the card and shows a retry hint."""
        controller = FeedController(
            ScriptedSource([page(1, 2), UpstreamError("HTTP error 500")])
        )
        await controller.initialize()
        await controller.wait_idle()

        screen = render_screen(controller)

        assert "Article 1" in screen
        assert "Could not load more articles. [r] retry" in screen


class TestRunBrowser:
    """Tests for the key loop."""

    async def test_navigate_and_like(self):
        controller = FeedController(ScriptedSource([page(*range(1, 11))]))
        client = RecordingLikeClient()
        likes = LikeToggle(client, controller.replace_article)

        await run_browser(controller, likes, read_key=scripted_keys("j", "j", "k", "l", "q"))

        assert controller.cursor == 1
        assert controller.items[1].is_liked is True
        assert client.calls == [(2, True)]

    async def test_retry_after_initial_failure(self, screens):
        source = ScriptedSource([UpstreamError("HTTP error 500"), page(*range(1, 11))])
        controller = FeedController(source)
        likes = LikeToggle(RecordingLikeClient(), controller.replace_article)

        steps = iter(["r"])

        def read_key():
            key = next(steps, None)
            if key is not None:
                return key
            screens.wait_for("WikTok  1/10")
            return "q"

        await run_browser(controller, likes, read_key=read_key)

        assert "Error\nHTTP error 500" in screens.frames[0]
        assert controller.error is None
        assert len(controller.items) == 10
        assert len(source.calls) == 2

    async def test_loading_screen_while_first_fetch_pending(self, screens):
        """Test that the first frame shows the initial loading state."""
        gate = asyncio.Event()
        controller = FeedController(ScriptedSource([page(*range(1, 11))], gate=gate))
        likes = LikeToggle(RecordingLikeClient(), controller.replace_article)

        await run_browser(controller, likes, read_key=lambda: "q")

        assert "Loading articles..." in screens.frames[0]
        assert controller.items == ()

    async def test_redraws_when_fetch_settles(self, screens):
        """Test that the card replaces the loading screen without a key press."""
        gate = asyncio.Event()
        asyncio.get_running_loop().call_later(0.05, gate.set)
        controller = FeedController(ScriptedSource([page(*range(1, 11))], gate=gate))
        likes = LikeToggle(RecordingLikeClient(), controller.replace_article)

        def read_key():
            screens.wait_for("WikTok  1/10")
            return "q"

        await run_browser(controller, likes, read_key=read_key)

        assert "Loading articles..." in screens.frames[0]
        assert screens.frames[-1].startswith("WikTok  1/10")

    async def test_toggle_source_resets_feed(self, screens):
        """Test that t switches the source and loads a fresh feed."""
        source = ToggleSource([page(*range(1, 11)), page(*range(101, 111), source="trending")])
        cache = SessionCache({})
        controller = FeedController(source, cache=cache)
        likes = LikeToggle(RecordingLikeClient(), controller.replace_article)
        steps = iter(["j", "t"])

        def read_key():
            key = next(steps, None)
            if key is not None:
                return key
            screens.wait_for("Article 101")
            return "q"

        await run_browser(controller, likes, read_key=read_key, article_source=source)

        assert source.source == "trending"
        assert [a.id for a in controller.items] == list(range(101, 111))
        assert controller.cursor == 0
        assert [a.id for a in cache.load()] == list(range(101, 111))
        assert "[trending]" in screens.frames[-1]
