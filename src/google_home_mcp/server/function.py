"""Google Cloud Functions entry point for the Google Home MCP tools.

Deploy with ``--entry-point google_home_mcp``. Accepts the same envelopes
as the HTTP server's ``POST /mcp`` and answers ``/health`` without a token.
"""

import asyncio
import logging
import threading

import functions_framework
from flask import Request

from google_home_mcp.auth import CredentialManager
from google_home_mcp.config import get_settings
from google_home_mcp.errors import UnknownToolError
from google_home_mcp.server.dispatcher import ToolDispatcher
from google_home_mcp.server.protocol import (
    HEALTH_PAYLOAD,
    BadRequestError,
    UnknownMethodError,
    check_bearer,
    handle_request,
)

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

_dispatcher: ToolDispatcher | None = None
_dispatcher_lock = threading.Lock()


def get_dispatcher() -> ToolDispatcher:
    """Get or create the dispatcher for this function instance."""
    global _dispatcher
    with _dispatcher_lock:
        if _dispatcher is None:
            settings = get_settings()
            logging.basicConfig(level=settings.log_level)
            credentials = CredentialManager(settings=settings)
            credentials.initialize()
            _dispatcher = ToolDispatcher(credentials)
        return _dispatcher


@functions_framework.http
def google_home_mcp(request: Request):
    """HTTP Cloud Function entry point."""
    if request.method == "OPTIONS":
        return ("", 204, CORS_HEADERS)

    if request.path == "/health":
        return (HEALTH_PAYLOAD, 200, CORS_HEADERS)

    expected_token = get_settings().auth_token.get_secret_value()
    if not check_bearer(request.headers.get("Authorization"), expected_token):
        return ({"error": "Unauthorized"}, 401, CORS_HEADERS)

    payload = request.get_json(silent=True)
    try:
        body = asyncio.run(handle_request(get_dispatcher(), payload))
    except UnknownToolError as e:
        return ({"error": str(e)}, 404, CORS_HEADERS)
    except (BadRequestError, UnknownMethodError) as e:
        return ({"error": str(e)}, 400, CORS_HEADERS)
    except Exception as e:
        logger.exception("Error handling request")
        return ({"error": str(e)}, 500, CORS_HEADERS)

    return (body, 200, CORS_HEADERS)
