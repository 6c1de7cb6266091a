"""MCP server implementation for Google Home.

Provides 6 tools:
- get_auth_url / authenticate: Google OAuth authorization code flow
- list_devices, execute_command, query_devices, get_device_states:
  Google Home device operations (require authentication)

Transports:
- Stdio (for Claude Desktop): ``google_home_mcp.server.stdio``
- HTTP + WebSocket: ``google_home_mcp.server.http_server``
- Google Cloud Functions: ``google_home_mcp.server.function``
"""

from google_home_mcp.server.dispatcher import TOOLS, ToolDispatcher, ToolResult, ToolSpec
from google_home_mcp.server.stdio import GoogleHomeServer, main


def create_server() -> GoogleHomeServer:
    """Create and configure a Google Home MCP server.

    Returns:
        GoogleHomeServer: Configured server instance ready to run.

    Example:
        >>> server = create_server()
        >>> asyncio.run(server.run())
    """
    return GoogleHomeServer()


__all__ = [
    "create_server",
    "GoogleHomeServer",
    "ToolDispatcher",
    "ToolResult",
    "ToolSpec",
    "TOOLS",
    "main",
]
