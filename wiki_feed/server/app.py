"""wiki_feed - MCP server with a JSON HTTP surface

This module implements the backend server using FastMCP with multi-transport
support (STDIO, SSE, and Streamable HTTP). Article tools are registered with
exception handling and logging decorators; the /api JSON routes are mounted
on the HTTP transports.
"""

import asyncio
import logging
import os
from typing import Optional

import click
from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from wiki_feed.config import ServerConfig, get_config, load_config
from wiki_feed.decorators.exception_handler import exception_handler
from wiki_feed.decorators.tool_logger import tool_logger
from wiki_feed.logging_config import setup_logging
from wiki_feed.server.routes import register_routes
from wiki_feed.services.catalog import ArticleCatalog
from wiki_feed.storage.database import Database
from wiki_feed.tools.article_tools import create_article_tools

logger = logging.getLogger(__name__)


def create_mcp_server(
    config: Optional[ServerConfig] = None,
    database: Optional[Database] = None,
) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        config: Optional server configuration
        database: Optional like store (one at config.db_path otherwise)

    Returns:
        Configured FastMCP server instance
    """
    if config is None:
        config = get_config()
    if database is None:
        database = Database(config.db_path)

    logger.info(f"Server config: {config.name} at log level {config.log_level}")

    # Configure DNS rebinding protection (disabled by default for development)
    dns_protection = os.getenv("MCP_DNS_REBINDING_PROTECTION", "false").lower() == "true"
    allowed_hosts_env = os.getenv("MCP_ALLOWED_HOSTS", "")
    allowed_hosts = [h.strip() for h in allowed_hosts_env.split(",") if h.strip()]

    logger.info(f"DNS rebinding protection: {'enabled' if dns_protection else 'disabled'}")
    if dns_protection and allowed_hosts:
        logger.info(f"Allowed hosts: {allowed_hosts}")

    mcp_server = FastMCP(
        config.name or "wiki_feed",
        transport_security=TransportSecuritySettings(
            enable_dns_rebinding_protection=dns_protection,
            allowed_hosts=allowed_hosts,
        ),
    )

    catalog = ArticleCatalog(database, config)
    register_tools(mcp_server, catalog, config)
    register_routes(mcp_server, catalog)

    logger.info("Server initialization complete")
    return mcp_server


def register_tools(mcp_server: FastMCP, catalog: ArticleCatalog, config: ServerConfig) -> None:
    """Register all article tools with the server using decorators.

    Registers decorated functions directly with MCP to preserve function
    signatures for proper parameter introspection.
    """
    for tool_func in create_article_tools(catalog):
        # Apply decorator chain: exception_handler → tool_logger
        decorated_func = exception_handler(tool_logger(tool_func, config.__dict__))

        tool_name = tool_func.__name__
        mcp_server.tool(name=tool_name)(decorated_func)

        logger.info(f"Registered article tool: {tool_name}")

    logger.info(f"Server '{mcp_server.name}' initialized with decorators")


@click.command()
@click.option(
    "--port",
    default=5000,
    help="Port to listen on for SSE or Streamable HTTP transport"
)
@click.option(
    "--host",
    default="127.0.0.1",
    help="Host to bind to (use 0.0.0.0 for Docker)"
)
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    default="streamable-http",
    help="Transport type (stdio, sse, or streamable-http)"
)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="YAML configuration file"
)
def serve(port: int, host: str, transport: str, config_path: Optional[str]) -> int:
    """Run the wiki_feed backend with the specified transport."""
    config = load_config(config_path).server
    setup_logging(config)

    database = Database(config.db_path)
    server = create_mcp_server(config, database)

    async def run_server():
        """Inner async function to run the server and manage the event loop."""
        try:
            if transport == "stdio":
                logger.info("Starting server with STDIO transport")
                await server.run_stdio_async()
            elif transport == "sse":
                logger.info(f"Starting server with SSE transport on {host}:{port}")
                server.settings.host = host
                server.settings.port = port
                await server.run_sse_async()
            elif transport == "streamable-http":
                logger.info(f"Starting server with Streamable HTTP transport on {host}:{port}")
                server.settings.host = host
                server.settings.port = port
                server.settings.streamable_http_path = "/mcp"
                await server.run_streamable_http_async()
            else:
                raise ValueError(f"Unknown transport: {transport}")
        finally:
            await database.close()

    try:
        asyncio.run(run_server())
        return 0
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        return 0
    except Exception as e:
        logger.error(f"Failed to start server: {e}", exc_info=True)
        return 1
