"""MCP server for the Productboard tools."""

from .server import MCPServerBase, create_mcp_server, main

__all__ = ["MCPServerBase", "create_mcp_server", "main"]
