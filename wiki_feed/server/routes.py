"""JSON HTTP surface of the wiki_feed backend.

Routes are mounted on the MCP server's Starlette app, so they are served by
the SSE and Streamable HTTP transports.
"""

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from wiki_feed.services.catalog import ArticleCatalog

logger = logging.getLogger(__name__)


def _int_param(request: Request, name: str) -> Optional[int]:
    """Integer query parameter, or None when absent or not a number."""
    value = request.query_params.get(name)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _require_thumbnail(request: Request) -> bool:
    return (
        request.query_params.get("requireThumbnail") == "true"
        or request.query_params.get("requireImage") == "true"
    )


def _server_error(error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        {"error": error, "message": str(exc) or "Unknown error"},
        status_code=500,
    )


def _article_id(request: Request) -> Optional[int]:
    try:
        return int(request.path_params["article_id"])
    except (KeyError, ValueError):
        return None


def register_routes(mcp_server: FastMCP, catalog: ArticleCatalog) -> None:
    """Register the /api routes on the server."""

    @mcp_server.custom_route("/api", methods=["GET"])
    async def api_root(request: Request) -> JSONResponse:
        return JSONResponse({"message": "Welcome to the WikTok API!"})

    @mcp_server.custom_route("/api/random", methods=["GET"])
    async def random_article(request: Request) -> JSONResponse:
        try:
            article = await catalog.random_article(
                require_thumbnail=_require_thumbnail(request),
                min_extract_length=_int_param(request, "minExtractLength"),
            )
        except Exception as e:
            logger.error(f"Error handling /api/random request: {e}")
            return _server_error("Failed to fetch Wikipedia article", e)
        return JSONResponse(article.to_dict())

    @mcp_server.custom_route("/api/random/batch", methods=["GET"])
    async def random_batch(request: Request) -> JSONResponse:
        try:
            articles = await catalog.random_articles(
                count=_int_param(request, "count"),
                require_thumbnail=_require_thumbnail(request),
                min_extract_length=_int_param(request, "minExtractLength"),
            )
        except Exception as e:
            logger.error(f"Error handling /api/random/batch request: {e}")
            return _server_error("Failed to fetch Wikipedia articles", e)
        return JSONResponse([a.to_dict() for a in articles])

    @mcp_server.custom_route("/api/trending", methods=["GET"])
    async def trending(request: Request) -> JSONResponse:
        try:
            articles = await catalog.trending_articles(_int_param(request, "count"))
        except Exception as e:
            logger.error(f"Error handling /api/trending request: {e}")
            return _server_error("Failed to fetch trending Wikipedia articles", e)
        return JSONResponse([a.to_dict() for a in articles])

    @mcp_server.custom_route("/api/articles", methods=["GET"])
    async def articles(request: Request) -> JSONResponse:
        try:
            result = await catalog.articles(
                source=request.query_params.get("source") or "random",
                count=_int_param(request, "count"),
                require_thumbnail=_require_thumbnail(request),
                min_extract_length=_int_param(request, "minExtractLength"),
            )
        except Exception as e:
            logger.error(f"Error handling /api/articles request: {e}")
            return _server_error("Failed to fetch Wikipedia articles", e)
        return JSONResponse([a.to_dict() for a in result])

    @mcp_server.custom_route("/api/articles/liked", methods=["GET"])
    async def liked(request: Request) -> JSONResponse:
        try:
            result = await catalog.liked_articles()
        except Exception as e:
            logger.error(f"Error handling /api/articles/liked request: {e}")
            return _server_error("Failed to fetch liked articles", e)
        return JSONResponse([a.to_dict() for a in result])

    @mcp_server.custom_route("/api/articles/{article_id}/like", methods=["POST", "DELETE"])
    async def like(request: Request) -> JSONResponse:
        article_id = _article_id(request)
        if article_id is None:
            return JSONResponse({"error": "Invalid article ID"}, status_code=400)

        liked = request.method == "POST"
        try:
            if liked:
                await catalog.like(article_id)
            else:
                await catalog.unlike(article_id)
        except Exception as e:
            logger.error(f"Error updating like for article {article_id}: {e}")
            action = "like" if liked else "unlike"
            return _server_error(f"Failed to {action} article", e)

        return JSONResponse({"success": True, "articleId": article_id, "isLiked": liked})
