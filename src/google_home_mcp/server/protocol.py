"""Request handling shared by the HTTP server and the serverless function.

Both accept the same JSON envelope:

    {"method": "tools/list"}
    {"method": "tools/call", "params": {"name": "...", "arguments": {...}}}

and answer with ``{"tools": [...]}`` or ``{"content": [{"type": "text", ...}]}``.
"""

import hmac
import logging
from typing import Any

from google_home_mcp.errors import GoogleHomeMCPError
from google_home_mcp.server.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

SERVICE_NAME = "google-home-mcp"
HEALTH_PAYLOAD = {"status": "ok", "service": SERVICE_NAME}


class BadRequestError(GoogleHomeMCPError):
    """The request envelope is malformed."""


class UnknownMethodError(GoogleHomeMCPError):
    """The envelope names a method other than tools/list or tools/call."""

    def __init__(self, method: Any) -> None:
        super().__init__(f"Unknown method: {method}")


def check_bearer(authorization: str | None, expected: str) -> bool:
    """Compare an Authorization header against the configured secret.

    An empty secret rejects every request.
    """
    if not expected or not authorization:
        return False
    return hmac.compare_digest(authorization, f"Bearer {expected}")


async def handle_request(dispatcher: ToolDispatcher, payload: Any) -> dict[str, Any]:
    """Dispatch a JSON envelope to the tool dispatcher.

    Args:
        dispatcher: Dispatcher to list or invoke tools on.
        payload: Decoded JSON request body.

    Returns:
        JSON-serializable response body.

    Raises:
        BadRequestError: If the envelope is malformed.
        UnknownMethodError: If the method is not supported.
        UnknownToolError: If tools/call names a tool not in the catalog.
    """
    if not isinstance(payload, dict):
        raise BadRequestError("Request body must be a JSON object")

    method = payload.get("method")
    if method == "tools/list":
        return {"tools": [spec.to_dict() for spec in dispatcher.list_operations()]}

    if method == "tools/call":
        params = payload.get("params")
        if not isinstance(params, dict) or not isinstance(params.get("name"), str):
            raise BadRequestError("tools/call requires params.name")
        arguments = params.get("arguments")
        if arguments is not None and not isinstance(arguments, dict):
            raise BadRequestError("params.arguments must be an object")

        result = await dispatcher.invoke(params["name"], arguments)
        return result.to_dict()

    raise UnknownMethodError(method)
