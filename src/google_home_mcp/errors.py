"""Error kinds raised by the credential manager and tool dispatcher.

Only ``UnknownToolError`` escapes ``ToolDispatcher.invoke``; every other
error is rendered into an ``Error: <message>`` text result at the dispatch
boundary.
"""


class GoogleHomeMCPError(Exception):
    """Base class for all google-home-mcp errors."""


class NotConfiguredError(GoogleHomeMCPError):
    """No OAuth2 client credential is available."""

    def __init__(self, message: str = "OAuth2 client not initialized") -> None:
        super().__init__(message)


class NotAuthenticatedError(GoogleHomeMCPError):
    """The operation requires a Google session that does not exist."""

    def __init__(self, message: str = "Not authenticated. Please authenticate first.") -> None:
        super().__init__(message)


class InvalidArgumentsError(GoogleHomeMCPError):
    """Tool arguments do not match the tool's declared schema."""


class UnknownToolError(GoogleHomeMCPError):
    """The requested tool name is not in the catalog."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class UpstreamError(GoogleHomeMCPError):
    """A call to Google (code exchange or device control) failed."""


class UpstreamTimeoutError(UpstreamError):
    """A call to Google did not complete within the configured timeout."""
