"""Standalone HTTP + WebSocket server for the Google Home MCP tools.

Routes:
    GET  /health  liveness check, no authentication
    POST /mcp     tools/list and tools/call envelopes (bearer token required)
    WS   /mcp     connection acknowledgement channel (bearer token required)

The WebSocket endpoint does not speak MCP: it announces readiness and
acknowledges each JSON-RPC message it receives.
"""

import json
import logging
from typing import Any

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route, WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect

from google_home_mcp.auth import CredentialManager
from google_home_mcp.config import Settings, get_settings
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

# WebSocket close code for policy violations (RFC 6455)
WS_POLICY_VIOLATION = 1008


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def create_app(
    settings: Settings | None = None, dispatcher: ToolDispatcher | None = None
) -> Starlette:
    """Build the Starlette application.

    Args:
        settings: Runtime settings. Loaded from the environment if omitted.
        dispatcher: Tool dispatcher to serve. A new one with an initialized
            CredentialManager is created if omitted.

    Returns:
        Configured Starlette app.
    """
    settings = settings or get_settings()
    if dispatcher is None:
        credentials = CredentialManager(settings=settings)
        credentials.initialize()
        dispatcher = ToolDispatcher(credentials)

    expected_token = settings.auth_token.get_secret_value()
    if not expected_token:
        logger.warning("AUTH_TOKEN is not set; all /mcp requests will be rejected")

    async def health(_request: Request) -> JSONResponse:
        return JSONResponse(HEALTH_PAYLOAD)

    async def mcp_http(request: Request) -> JSONResponse:
        if not check_bearer(request.headers.get("authorization"), expected_token):
            return _error("Unauthorized", 401)

        try:
            payload: Any = await request.json()
        except ValueError:
            return _error("Request body must be valid JSON", 400)

        try:
            body = await handle_request(dispatcher, payload)
        except UnknownToolError as e:
            return _error(str(e), 404)
        except (BadRequestError, UnknownMethodError) as e:
            return _error(str(e), 400)
        return JSONResponse(body)

    async def mcp_websocket(websocket: WebSocket) -> None:
        if not check_bearer(websocket.headers.get("authorization"), expected_token):
            await websocket.close(code=WS_POLICY_VIOLATION)
            return

        await websocket.accept()
        logger.info("New WebSocket connection established")
        await websocket.send_json({"jsonrpc": "2.0", "method": "connection.ready", "params": {}})

        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError as e:
                    logger.error(f"WebSocket message error: {e}")
                    continue

                request_id = message.get("id") if isinstance(message, dict) else None
                await websocket.send_json(
                    {
                        "jsonrpc": "2.0",
                        "id": request_id,
                        "result": {"message": "MCP server connected"},
                    }
                )
        except WebSocketDisconnect:
            logger.info("WebSocket connection closed")

    app = Starlette(
        routes=[
            Route("/health", health, methods=["GET", "HEAD"]),
            Route("/mcp", mcp_http, methods=["POST"]),
            WebSocketRoute("/mcp", mcp_websocket),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["Authorization", "Content-Type"],
            )
        ],
    )
    app.state.dispatcher = dispatcher
    return app


def main(host: str | None = None, port: int | None = None) -> None:
    """Run the HTTP server with uvicorn."""
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    app = create_app(settings)

    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info(f"Google Home MCP server listening on port {bind_port}")
    uvicorn.run(app, host=bind_host, port=bind_port)


if __name__ == "__main__":
    main()
