"""Google Home MCP - expose Google Home (HomeGraph) actions as MCP tools."""

from google_home_mcp.__version__ import __version__

__all__ = ["__version__"]
