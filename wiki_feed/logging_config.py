"""Logging setup for wiki_feed.

All modules log through children of the ``wiki_feed`` logger.
"""

import logging
from typing import Optional

from wiki_feed.config import ServerConfig

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s %(message)s"
DATE_FORMAT = "%H:%M:%S"

logger = logging.getLogger("wiki_feed")


def setup_logging(config: Optional[ServerConfig] = None) -> logging.Logger:
    """Configure the package logger.

    Safe to call more than once; the handler is only installed once.

    Args:
        config: Optional server configuration (for the log level)

    Returns:
        The configured package logger
    """
    level_name = (config.log_level if config else "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logger.setLevel(level)
    if not any(getattr(h, "_wiki_feed", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._wiki_feed = True
        logger.addHandler(handler)
    logger.propagate = False

    # Quiet noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return logger
