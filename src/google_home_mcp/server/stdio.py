"""Google Home MCP server over stdio for Claude Desktop integration."""

import asyncio
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from google_home_mcp.auth import CredentialManager
from google_home_mcp.config import Settings, get_settings
from google_home_mcp.server.dispatcher import ToolDispatcher
from google_home_mcp.server.protocol import SERVICE_NAME

logger = logging.getLogger(__name__)


class GoogleHomeServer:
    """MCP server exposing the Google Home tools over stdio.

    Attributes:
        server: MCP Server instance.
        credentials: CredentialManager holding the Google OAuth state.
        dispatcher: ToolDispatcher that runs the tools.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.server = Server(SERVICE_NAME)
        self.credentials = CredentialManager(settings=self.settings)
        self.dispatcher = ToolDispatcher(self.credentials)
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Register MCP tool handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return [spec.to_tool() for spec in self.dispatcher.list_operations()]

        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            result = await self.dispatcher.invoke(name, arguments)
            return result.to_content()

    def initialize(self) -> None:
        try:
            self.credentials.initialize()
        except Exception:
            logger.warning(
                "Could not initialize Google Auth. You will need to authenticate.",
                exc_info=True,
            )

    async def run(self) -> None:
        """Run the MCP server using stdio transport."""
        self.initialize()
        async with stdio_server() as (read_stream, write_stream):
            logger.info("Google Home MCP server started")
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


def main() -> None:
    """Entry point for the stdio MCP server."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    server = GoogleHomeServer(settings=settings)
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
