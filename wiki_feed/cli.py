"""Command line entry point: ``wiki-feed serve`` and ``wiki-feed browse``."""

import click

from wiki_feed.client.terminal import browse
from wiki_feed.server.app import serve


@click.group()
def cli() -> None:
    """Swipeable Wikipedia feed: backend server and terminal client."""


cli.add_command(serve)
cli.add_command(browse)


def main() -> None:
    cli()
