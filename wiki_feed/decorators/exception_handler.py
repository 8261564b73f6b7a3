"""Exception handling decorator for MCP tools.

Uncaught exceptions become ``{"success": False, "error": ...}`` results so a
failing upstream call never tears down the MCP session.
"""

import functools
import logging
from typing import Any, Awaitable, Callable, Dict

from wiki_feed.errors import WikiFeedError

logger = logging.getLogger(__name__)


def exception_handler(
    func: Callable[..., Awaitable[Dict[str, Any]]],
) -> Callable[..., Awaitable[Dict[str, Any]]]:
    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Dict[str, Any]:
        try:
            return await func(*args, **kwargs)
        except WikiFeedError as e:
            logger.warning(f"{func.__name__} failed: {e}")
            return {
                "success": False,
                "error": type(e).__name__,
                "message": str(e),
            }
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
            return {
                "success": False,
                "error": "InternalError",
                "message": str(e) or "Unknown error",
            }

    return wrapper
