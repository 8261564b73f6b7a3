"""Main module for wiki_feed.

This module allows the CLI to be run as a Python module using:
python -m wiki_feed

It delegates to the command group in wiki_feed.cli.
"""

from wiki_feed.cli import main

if __name__ == "__main__":
    main()
