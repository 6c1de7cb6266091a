"""Tool catalog and dispatch shared by every transport.

Every tool call goes through the same steps: look the tool up, validate
its arguments, check authentication when the tool needs a Google session,
run it, and wrap the outcome in a single text block. Failures after the
lookup are returned as ``Error: <message>`` text rather than raised, so the
calling assistant always gets something it can render. An unknown tool name
is the exception: it raises ``UnknownToolError``.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from mcp.types import TextContent, Tool
from pydantic import BaseModel, Field, ValidationError

from google_home_mcp.auth import CredentialManager
from google_home_mcp.errors import (
    GoogleHomeMCPError,
    InvalidArgumentsError,
    NotAuthenticatedError,
    UnknownToolError,
)
from google_home_mcp.server.devices import HomeGraphDevices

logger = logging.getLogger(__name__)

AUTH_URL_MESSAGE = "Please visit this URL to authorize the application:\n{url}"
ALREADY_AUTHENTICATED_MESSAGE = "Already authenticated with Google."
AUTHENTICATED_MESSAGE = "Successfully authenticated with Google!"


# =============================================================================
# Argument schemas
# =============================================================================


class NoArguments(BaseModel):
    pass


class AuthenticateArguments(BaseModel):
    code: str = Field(description="The authorization code from Google OAuth")


class ExecuteCommandArguments(BaseModel):
    command: str = Field(description="The command to execute on Google Home devices")
    devices: list[str] | None = Field(
        default=None, description="Optional list of device IDs to target"
    )


class QueryDevicesArguments(BaseModel):
    devices: list[str] | None = Field(
        default=None, description="Optional list of device IDs to query"
    )


class GetDeviceStatesArguments(BaseModel):
    device_ids: list[str] = Field(
        alias="deviceIds", description="List of device IDs to get states for"
    )


def _input_schema(model: type[BaseModel]) -> dict[str, Any]:
    """JSON schema for a tool's arguments, without pydantic's titles."""
    schema = model.model_json_schema()
    schema.pop("title", None)
    properties = schema.setdefault("properties", {})
    for prop in properties.values():
        prop.pop("title", None)
    schema.setdefault("required", [])
    return schema


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "arguments"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


# =============================================================================
# Catalog
# =============================================================================


@dataclass(frozen=True)
class ToolSpec:
    """A catalog entry.

    Attributes:
        name: Tool name exposed to the assistant.
        description: Human readable description.
        arguments: Pydantic model the arguments must validate against.
        requires_auth: Whether a Google session is needed.
    """

    name: str
    description: str
    arguments: type[BaseModel]
    requires_auth: bool

    @property
    def input_schema(self) -> dict[str, Any]:
        return _input_schema(self.arguments)

    def to_tool(self) -> Tool:
        return Tool(name=self.name, description=self.description, inputSchema=self.input_schema)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="get_auth_url",
        description="Get the Google OAuth URL for authentication",
        arguments=NoArguments,
        requires_auth=False,
    ),
    ToolSpec(
        name="authenticate",
        description="Authenticate with Google using an authorization code",
        arguments=AuthenticateArguments,
        requires_auth=False,
    ),
    ToolSpec(
        name="list_devices",
        description="List all available Google Home devices",
        arguments=NoArguments,
        requires_auth=True,
    ),
    ToolSpec(
        name="execute_command",
        description="Execute a command on Google Home devices",
        arguments=ExecuteCommandArguments,
        requires_auth=True,
    ),
    ToolSpec(
        name="query_devices",
        description="Query the state of Google Home devices",
        arguments=QueryDevicesArguments,
        requires_auth=True,
    ),
    ToolSpec(
        name="get_device_states",
        description="Get detailed states of specific devices",
        arguments=GetDeviceStatesArguments,
        requires_auth=True,
    ),
)


@dataclass(frozen=True)
class ToolResult:
    """Outcome of a tool call, always a single text block."""

    text: str
    is_error: bool = False

    def to_content(self) -> list[TextContent]:
        return [TextContent(type="text", text=self.text)]

    def to_dict(self) -> dict[str, Any]:
        return {"content": [{"type": "text", "text": self.text}]}


# =============================================================================
# Dispatcher
# =============================================================================


class ToolDispatcher:
    """Validate, auth-gate and run catalog tools.

    Attributes:
        credentials: Credential manager consulted for auth and code exchange.
    """

    def __init__(self, credentials: CredentialManager) -> None:
        self.credentials = credentials
        self._devices: HomeGraphDevices | None = None
        self._specs = {spec.name: spec for spec in TOOLS}
        self._handlers: dict[str, Callable[[Any], Awaitable[str]]] = {
            "get_auth_url": self._get_auth_url,
            "authenticate": self._authenticate,
            "list_devices": self._list_devices,
            "execute_command": self._execute_command,
            "query_devices": self._query_devices,
            "get_device_states": self._get_device_states,
        }

    def list_operations(self) -> list[ToolSpec]:
        """Return the tool catalog in its fixed order."""
        return list(TOOLS)

    async def invoke(self, name: str, arguments: dict[str, Any] | None) -> ToolResult:
        """Run a tool by name.

        Args:
            name: Tool name from the catalog.
            arguments: Tool arguments; None is treated as empty.

        Returns:
            ToolResult with the tool output, or ``Error: ...`` text on failure.

        Raises:
            UnknownToolError: If ``name`` is not in the catalog.
        """
        spec = self._specs.get(name)
        if spec is None:
            raise UnknownToolError(name)

        try:
            validated = self._validate(spec, arguments)
            if spec.requires_auth and not self.credentials.is_authenticated():
                raise NotAuthenticatedError()
            text = await self._handlers[name](validated)
        except GoogleHomeMCPError as e:
            logger.warning(f"Tool {name} failed: {e}")
            return ToolResult(text=f"Error: {e}", is_error=True)
        except Exception as e:
            logger.exception(f"Error calling tool {name}")
            return ToolResult(text=f"Error: {e}", is_error=True)

        return ToolResult(text=text)

    def _validate(self, spec: ToolSpec, arguments: dict[str, Any] | None) -> BaseModel:
        try:
            return spec.arguments.model_validate({} if arguments is None else arguments)
        except ValidationError as e:
            raise InvalidArgumentsError(
                f"Invalid arguments for {spec.name}: {_format_validation_error(e)}"
            ) from e

    def _device_client(self) -> HomeGraphDevices:
        if self._devices is None:
            self._devices = HomeGraphDevices(self.credentials.get_client())
        return self._devices

    async def _get_auth_url(self, arguments: NoArguments) -> str:
        if self.credentials.is_authenticated():
            return ALREADY_AUTHENTICATED_MESSAGE
        return AUTH_URL_MESSAGE.format(url=self.credentials.get_authorization_url())

    async def _authenticate(self, arguments: AuthenticateArguments) -> str:
        # Code exchange is a blocking network call
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.credentials.exchange_code, arguments.code)
        self._devices = None
        return AUTHENTICATED_MESSAGE

    async def _list_devices(self, arguments: NoArguments) -> str:
        return self._device_client().list_devices()

    async def _execute_command(self, arguments: ExecuteCommandArguments) -> str:
        return self._device_client().execute_command(arguments.command, arguments.devices)

    async def _query_devices(self, arguments: QueryDevicesArguments) -> str:
        return self._device_client().query_devices(arguments.devices)

    async def _get_device_states(self, arguments: GetDeviceStatesArguments) -> str:
        return self._device_client().get_device_states(arguments.device_ids)
