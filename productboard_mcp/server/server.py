"""MCP server exposing Productboard tools.

Every tool call is gated by the permissions discovered for the configured
API token: calls the token cannot make are rejected before any request is
sent to Productboard.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from dotenv import load_dotenv
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import EmbeddedResource, ImageContent, TextContent, Tool

from ..core.config import settings
from ..permissions.permissions import PermissionModel
from ..permissions.tool_permissions import check_tool_permission, get_tool_requirement
from ..tools import ALL_TOOL_SCHEMAS
from ..tools.session import get_current_permissions, reset_session
from ..utils.errors import ToolPermissionError
from ..utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

PermissionProvider = Callable[[], Awaitable[PermissionModel]]


class MCPServerBase:
    """
    MCP server with tool registration and permission gating.

    Usage:
        server = create_mcp_server("productboard-mcp")
        server.setup_handlers()
        await server.run()
    """

    def __init__(
        self,
        name: str,
        setup_defaults: bool = True,
        permission_provider: PermissionProvider | None = None,
    ):
        """
        Initialize MCP server.

        Args:
            name: Server name
            setup_defaults: Whether or not to register the Productboard tools
            permission_provider: Coroutine factory returning the caller's
                PermissionModel (defaults to cached discovery)
        """
        self.app = Server(name)
        self.tools: dict[str, dict[str, Any]] = {}
        self._tool_handlers: dict[str, Callable] = {}
        self._permission_provider = permission_provider or get_current_permissions

        if setup_defaults:
            setup_default_tools(self)

    def register_tool(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any],
        handler: Callable,
    ):
        """
        Register a tool with the server.

        Args:
            name: Tool name
            description: Tool description
            input_schema: JSON schema for tool inputs
            handler: Async function to handle tool calls
        """
        self.tools[name] = {
            "name": name,
            "description": description,
            "input_schema": input_schema,
        }
        self._tool_handlers[name] = handler
        logger.info(f"Registered tool: {name}")

    async def authorize(self, name: str) -> None:
        """Check discovered permissions allow a tool.

        Tools with no requirement run without a permission lookup, so a tool
        that re-probes itself (pb_get_permissions) does not trigger a second run.

        Raises:
            ToolPermissionError: If the tool is not allowed
            TimeoutError: If permission discovery did not finish in time
        """
        if get_tool_requirement(name).is_unrestricted:
            return

        model = await self._permission_provider()
        allowed, missing = check_tool_permission(name, model)
        if not allowed:
            raise ToolPermissionError(name, missing)

    async def execute_tool(self, name: str, arguments: dict[str, Any] | None) -> dict[str, Any]:
        """Authorize and run a tool, returning a JSON-serializable result.

        Errors are returned as payloads with an ``error`` key rather than raised.
        """
        logger.info(f"Calling tool: {name} with arguments: {arguments}")

        try:
            if name not in self._tool_handlers:
                raise ValueError(f"Unknown tool: {name}")

            await self.authorize(name)

            handler = self._tool_handlers[name]
            return await handler(**(arguments or {}))

        except ToolPermissionError as e:
            logger.warning(f"Permission denied for {name}: {e}")
            return {
                "error": "insufficient_permissions",
                "message": str(e),
                "tool": name,
                "missing": e.missing,
                "requirement": get_tool_requirement(name).description,
            }

        except TimeoutError:
            logger.error(f"Permission discovery timed out before running {name}")
            return {
                "error": "permission_discovery_timeout",
                "message": "Could not determine permissions in time; try again",
                "tool": name,
            }

        except (ValueError, TypeError) as e:
            logger.error(f"Validation error in {name}: {e}")
            return {
                "error": "validation_error",
                "message": str(e),
                "tool": name,
            }

        except Exception as e:
            logger.exception(f"Error executing tool {name}: {e}")
            return {
                "error": "execution_error",
                "message": str(e),
                "tool": name,
            }

    def setup_handlers(self) -> None:
        """Set up MCP handlers for tool listing and calling."""

        @self.app.list_tools()
        async def list_tools() -> list[Tool]:
            """List available MCP tools."""
            logger.info("Listing available tools")
            return [
                Tool(
                    name=tool_info["name"],
                    description=tool_info["description"],
                    inputSchema=tool_info["input_schema"],
                )
                for tool_info in self.tools.values()
            ]

        @self.app.call_tool()
        async def call_tool(
            name: str, arguments: Any
        ) -> Sequence[TextContent | ImageContent | EmbeddedResource]:
            """Execute a tool with the given arguments."""
            result = await self.execute_tool(name, arguments)
            return [TextContent(type="text", text=json.dumps(result, indent=2))]

    async def run(self) -> None:
        """Run the MCP server over stdio."""
        logger.info(f"Starting MCP Server: {self.app.name}")

        try:
            async with stdio_server() as (read_stream, write_stream):
                logger.info("MCP server running on stdio")
                await self.app.run(
                    read_stream,
                    write_stream,
                    self.app.create_initialization_options(),
                )
        finally:
            await reset_session()


def create_mcp_server(name: str | None = None) -> MCPServerBase:
    """
    Create a new MCP server with the Productboard tools registered.

    Args:
        name: Server name (default: settings.mcp_server_name)

    Returns:
        MCPServerBase instance
    """
    return MCPServerBase(name or settings.mcp_server_name)


def setup_default_tools(server: MCPServerBase) -> None:
    """Register every tool in ALL_TOOL_SCHEMAS."""
    for schema in ALL_TOOL_SCHEMAS:
        server.register_tool(
            name=schema["name"],
            description=schema["description"],
            input_schema=schema["input_schema"],
            handler=schema["handler"],
        )


def main() -> None:
    """Console entry point."""
    # Load environment variables
    load_dotenv()
    setup_logging(level=settings.log_level, log_file=settings.get_log_file("mcp_server"))
    server = create_mcp_server()
    server.setup_handlers()
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
