"""Terminal front end for the feed.

A keyboard-driven viewer over FeedController: one card at a time, j/k or the
arrow keys to move, l to like, e to expand, t to switch between random and
trending articles, r to retry, q to quit.
"""

import asyncio
import logging
import textwrap
from dataclasses import replace
from typing import Callable, List, Optional, Set

import click

from wiki_feed.client.cache import FileSessionStore, SessionCache
from wiki_feed.client.controller import FeedController, FeedPhase
from wiki_feed.client.events import InputRouter
from wiki_feed.client.likes import HttpLikeClient, LikeToggle
from wiki_feed.client.source import HttpArticleSource
from wiki_feed.config import FeedConfig, load_config
from wiki_feed.logging_config import setup_logging

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 300
WRAP_WIDTH = 78
QUIT_KEYS = ("q", "\x03", "\x04")


def render_screen(
    controller: FeedController,
    expanded: bool = False,
    source_label: Optional[str] = None,
) -> str:
    """Text for the current state of the feed."""
    if controller.phase is FeedPhase.LOADING_INITIAL:
        return "WikTok\n\nLoading articles..."

    if controller.shows_fullscreen_error:
        return f"WikTok\n\nError\n{controller.error}\n\n[r] Try Again  [q] Quit"

    article = controller.current
    if article is None:
        return "WikTok\n\nNo articles yet.\n\n[r] Load  [q] Quit"

    lines: List[str] = [
        f"WikTok  {controller.cursor + 1}/{len(controller.items)}"
        + (f"  [{source_label}]" if source_label else ""),
        "",
        article.title + ("  ♥" if article.is_liked else ""),
    ]
    if article.source == "trending" and article.rank is not None:
        lines.append(f"Trending #{article.rank} ({article.views or 0:,} views)")
    lines.append("")

    extract = article.extract
    if len(extract) > PREVIEW_CHARS and not expanded:
        extract = extract[:PREVIEW_CHARS] + "..."
    lines.extend(textwrap.wrap(extract, WRAP_WIDTH) or [""])
    lines.extend(["", article.url])
    if article.thumbnail:
        lines.append(f"Image: {article.thumbnail}")

    lines.append("")
    if controller.phase is FeedPhase.LOADING_MORE:
        lines.append("Loading more articles...")
    elif controller.error is not None:
        lines.append("Could not load more articles. [r] retry")

    lines.append("[j/↓] next  [k/↑] previous  [l] like  [e] expand  [t] source  [q] quit")
    return "\n".join(lines)


async def run_browser(
    controller: FeedController,
    likes: LikeToggle,
    read_key: Callable[[], str] = click.getchar,
    wheel_quiet_period: float = 0.1,
    article_source: Optional[HttpArticleSource] = None,
) -> None:
    """Drive the controller from key presses until the user quits.

    The screen is redrawn after every key and whenever a fetch settles, so
    loading and error states show up without waiting for input. The ``t``
    key switches ``article_source`` between random and trending.
    """
    router = InputRouter(controller.advance, wheel_quiet_period)
    expanded = False
    fetches: Set[asyncio.Task] = {asyncio.create_task(controller.initialize())}
    key_task: Optional[asyncio.Future] = None

    # Let the first fetch start so the loading state is on the first screen
    await asyncio.sleep(0)
    try:
        while True:
            label = article_source.source if article_source is not None else None
            click.clear()
            click.echo(render_screen(controller, expanded, source_label=label))

            if key_task is None:
                key_task = asyncio.ensure_future(asyncio.to_thread(read_key))

            fetches = {task for task in fetches if not task.done()}
            waiting = {key_task, *fetches}
            if controller.pending_prefetch is not None:
                waiting.add(controller.pending_prefetch)

            done, _ = await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)
            if key_task not in done:
                continue

            key = key_task.result()
            key_task = None
            if key in QUIT_KEYS:
                break

            if key == "r":
                if controller.error is not None or not controller.items:
                    fetches.add(asyncio.create_task(controller.retry()))
            elif key == "t" and article_source is not None:
                article_source.toggle_source()
                expanded = False
                fetches.add(asyncio.create_task(controller.reset()))
            elif key == "l":
                if controller.current is not None:
                    result = await likes.toggle(controller.current)
                    if result.error:
                        logger.warning(f"Like not saved: {result.error}")
            elif key == "e":
                expanded = not expanded
            elif router.key(key) is not None:
                expanded = False
    finally:
        router.close()
        for task in fetches:
            task.cancel()


async def _browse(feed: FeedConfig, store: FileSessionStore) -> None:
    source = HttpArticleSource(
        feed.api_url,
        source=feed.source,
        require_thumbnail=feed.require_thumbnail,
        min_extract_length=feed.min_extract_length,
        timeout=feed.request_timeout,
    )
    controller = FeedController(
        source,
        cache=SessionCache(store, key=feed.cache_key),
        page_size=feed.page_size,
        prefetch_threshold=feed.prefetch_threshold,
    )
    likes = LikeToggle(
        HttpLikeClient(feed.api_url, timeout=feed.request_timeout),
        controller.replace_article,
    )
    await run_browser(
        controller,
        likes,
        wheel_quiet_period=feed.wheel_quiet_period,
        article_source=source,
    )


@click.command()
@click.option("--api-url", default=None, help="Backend URL (default from config)")
@click.option(
    "--source",
    type=click.Choice(["random", "trending"]),
    default=None,
    help="Article source for the feed"
)
@click.option("--session", "session_id", default=None, help="Resume a previous session")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="YAML configuration file"
)
def browse(
    api_url: Optional[str],
    source: Optional[str],
    session_id: Optional[str],
    config_path: Optional[str],
) -> None:
    """Browse the Wikipedia feed in the terminal."""
    config = load_config(config_path)
    # Keep info logs from interleaving with the card display
    setup_logging(replace(config.server, log_level="WARNING"))

    feed = config.feed
    if api_url:
        feed = replace(feed, api_url=api_url)
    if source:
        feed = replace(feed, source=source)

    store = FileSessionStore(feed.session_dir, session_id)
    try:
        asyncio.run(_browse(feed, store))
    except KeyboardInterrupt:
        pass
    click.echo(f"Session {store.session_id} (resume with --session {store.session_id})")
