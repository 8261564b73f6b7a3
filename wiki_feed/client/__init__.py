"""Feed client: controller and collaborators."""

from .cache import FileSessionStore, SessionCache
from .controller import FeedController, FeedPhase
from .events import InputRouter, Intent, WheelDebouncer
from .likes import HttpLikeClient, LikeResult, LikeToggle
from .source import HttpArticleSource
from .window import render_window

__all__ = [
    "FeedController",
    "FeedPhase",
    "FileSessionStore",
    "HttpArticleSource",
    "HttpLikeClient",
    "InputRouter",
    "Intent",
    "LikeResult",
    "LikeToggle",
    "SessionCache",
    "WheelDebouncer",
    "render_window",
]
