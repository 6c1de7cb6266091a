"""Integration tests for the Cloud Functions entry point."""

import importlib
from collections.abc import Generator
from typing import Any
from unittest.mock import patch

import flask
import pytest

from google_home_mcp.config import Settings
from google_home_mcp.server import function
from google_home_mcp.server.dispatcher import ToolDispatcher
from google_home_mcp.server.function import CORS_HEADERS, google_home_mcp

app = flask.Flask(__name__)


@pytest.fixture
def patched_function(
    settings: Settings, dispatcher: ToolDispatcher
) -> Generator[ToolDispatcher, None, None]:
    with (
        patch("google_home_mcp.server.function.get_settings", return_value=settings),
        patch("google_home_mcp.server.function.get_dispatcher", return_value=dispatcher),
    ):
        yield dispatcher


def call(path: str = "/", method: str = "POST", **kwargs: Any) -> tuple[Any, int, dict]:
    with app.test_request_context(path, method=method, **kwargs):
        return google_home_mcp(flask.request)


@pytest.mark.integration
@pytest.mark.usefixtures("patched_function")
class TestCloudFunction:
    """Tests for the google_home_mcp HTTP function."""

    def test_should_answer_preflight(self) -> None:
        body, status, headers = call(method="OPTIONS")

        assert status == 204
        assert body == ""
        assert headers == CORS_HEADERS

    def test_health_needs_no_token(self) -> None:
        body, status, headers = call("/health", method="GET")

        assert status == 200
        assert body == {"status": "ok", "service": "google-home-mcp"}
        assert headers["Access-Control-Allow-Origin"] == "*"

    def test_should_reject_missing_token(self) -> None:
        body, status, _ = call(json={"method": "tools/list"})

        assert status == 401
        assert body == {"error": "Unauthorized"}

    def test_should_list_tools(self, auth_headers: dict[str, str]) -> None:
        body, status, _ = call(json={"method": "tools/list"}, headers=auth_headers)

        assert status == 200
        assert len(body["tools"]) == 6

    def test_should_call_tool(self, auth_headers: dict[str, str]) -> None:
        body, status, _ = call(
            json={"method": "tools/call", "params": {"name": "query_devices"}},
            headers=auth_headers,
        )

        assert status == 200
        assert body["content"][0]["text"] == (
            "Error: Not authenticated. Please authenticate first."
        )

    def test_should_404_unknown_tool(self, auth_headers: dict[str, str]) -> None:
        body, status, _ = call(
            json={"method": "tools/call", "params": {"name": "unknown_op"}},
            headers=auth_headers,
        )

        assert status == 404
        assert body == {"error": "Unknown tool: unknown_op"}

    def test_should_400_unknown_method(self, auth_headers: dict[str, str]) -> None:
        _, status, _ = call(json={"method": "prompts/list"}, headers=auth_headers)

        assert status == 400

    def test_should_400_body_that_is_not_json(self, auth_headers: dict[str, str]) -> None:
        body, status, _ = call(
            data="{not json", content_type="application/json", headers=auth_headers
        )

        assert status == 400
        assert "error" in body

    def test_should_500_unexpected_failure(self, auth_headers: dict[str, str]) -> None:
        with patch(
            "google_home_mcp.server.function.handle_request", side_effect=RuntimeError("boom")
        ):
            body, status, _ = call(json={"method": "tools/list"}, headers=auth_headers)

        assert status == 500
        assert body == {"error": "boom"}


@pytest.mark.integration
class TestGetDispatcher:
    def test_should_create_once_and_reuse(
        self, settings: Settings, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(function, "_dispatcher", None)

        with patch("google_home_mcp.server.function.get_settings", return_value=settings):
            first = function.get_dispatcher()
            second = function.get_dispatcher()

        assert first is second
        assert first.credentials.settings is settings
        assert first.credentials.is_authenticated() is False

    def test_should_configure_logging_on_first_use_only(
        self, settings: Settings, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(function, "_dispatcher", None)

        with (
            patch("google_home_mcp.server.function.get_settings", return_value=settings),
            patch("google_home_mcp.server.function.logging.basicConfig") as mock_basic_config,
        ):
            function.get_dispatcher()
            function.get_dispatcher()

        mock_basic_config.assert_called_once_with(level=settings.log_level)

    def test_import_leaves_root_logger_alone(self) -> None:
        with patch("logging.basicConfig") as mock_basic_config:
            importlib.reload(function)

        mock_basic_config.assert_not_called()
