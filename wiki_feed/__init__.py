"""wiki_feed - a swipeable feed of Wikipedia articles."""

__version__ = "0.1.0"
