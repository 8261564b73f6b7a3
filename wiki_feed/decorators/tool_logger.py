"""Logging decorator for MCP tools."""

import functools
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)


def tool_logger(
    func: Callable[..., Awaitable[Dict[str, Any]]],
    config: Optional[Dict[str, Any]] = None,
) -> Callable[..., Awaitable[Dict[str, Any]]]:
    """Log each tool call with its arguments, outcome and duration."""
    server_name = (config or {}).get("name", "wiki_feed")

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Dict[str, Any]:
        logger.info(f"[{server_name}] {func.__name__} called with {kwargs}")
        start = time.perf_counter()
        try:
            result = await func(*args, **kwargs)
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            logger.error(f"[{server_name}] {func.__name__} raised after {elapsed:.1f}ms")
            raise

        elapsed = (time.perf_counter() - start) * 1000
        if isinstance(result, dict) and result.get("success") is False:
            logger.warning(f"[{server_name}] {func.__name__} failed in {elapsed:.1f}ms")
        else:
            logger.info(f"[{server_name}] {func.__name__} completed in {elapsed:.1f}ms")
        return result

    return wrapper
