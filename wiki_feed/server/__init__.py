"""MCP server package initialization"""

from wiki_feed.server.app import create_mcp_server

__all__ = ["create_mcp_server"]
