"""Shared pytest fixtures for google-home-mcp tests.

This module provides reusable fixtures for OAuth client credentials,
token storage, the credential manager and the tool dispatcher.
"""

import json
import time
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from google_auth_oauthlib.flow import Flow

from google_home_mcp.auth import CredentialManager, TokenSet, TokenStorage
from google_home_mcp.config import Settings
from google_home_mcp.server.dispatcher import ToolDispatcher

TEST_AUTH_TOKEN = "test-bearer-secret"  # nosec B105

# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of the tests."""
    for name in (
        "GOOGLE_CREDENTIALS",
        "AUTH_TOKEN",
        "PORT",
        "GOOGLE_HOME_MCP_CREDENTIALS_PATH",
        "GOOGLE_HOME_MCP_TOKEN_PATH",
        "GOOGLE_HOME_MCP_REQUEST_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Client Credential Fixtures
# =============================================================================


@pytest.fixture
def client_secrets() -> dict[str, Any]:
    """A Google 'installed' application client secrets document."""
    return {
        "installed": {
            "client_id": "test-client-id.apps.googleusercontent.com",
            "client_secret": "test-client-secret",  # pragma: allowlist secret
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["http://localhost:3000/oauth2callback", "http://localhost"],
        }
    }


@pytest.fixture
def credentials_file(tmp_path: Path, client_secrets: dict[str, Any]) -> Path:
    """Write client secrets to a temporary credentials.json."""
    path = tmp_path / "credentials.json"
    path.write_text(json.dumps(client_secrets))
    return path


@pytest.fixture
def token_path(tmp_path: Path) -> Path:
    return tmp_path / "token.json"


@pytest.fixture
def settings(credentials_file: Path, token_path: Path) -> Settings:
    """Settings pointing at temporary credential and token files."""
    return Settings(
        _env_file=None,
        credentials_path=credentials_file,
        token_path=token_path,
        auth_token=TEST_AUTH_TOKEN,
    )


@pytest.fixture
def unconfigured_settings(tmp_path: Path, token_path: Path) -> Settings:
    """Settings with no credential source available."""
    return Settings(
        _env_file=None,
        credentials_path=tmp_path / "missing-credentials.json",
        token_path=token_path,
        auth_token=TEST_AUTH_TOKEN,
    )


# =============================================================================
# Token Fixtures
# =============================================================================


@pytest.fixture
def provider_token() -> dict[str, Any]:
    """A token response as returned by Google's token endpoint via oauthlib."""
    return {
        "access_token": "ya29.test-access-token",
        "refresh_token": "1//test-refresh-token",
        "expires_in": 3599,
        "expires_at": time.time() + 3599,
        "scope": [
            "https://www.googleapis.com/auth/homegraph",
            "https://www.googleapis.com/auth/assistant-sdk-prototype",
        ],
        "token_type": "Bearer",
    }


@pytest.fixture
def stored_token(provider_token: dict[str, Any]) -> TokenSet:
    return TokenSet.from_provider(provider_token)


@pytest.fixture
def token_storage(token_path: Path) -> TokenStorage:
    return TokenStorage(token_path)


# =============================================================================
# OAuth Flow Mocks
# =============================================================================


@pytest.fixture
def mock_fetch_token(provider_token: dict[str, Any]) -> Generator[MagicMock, None, None]:
    """Patch the code exchange so no request reaches Google."""
    with patch.object(Flow, "fetch_token", return_value=provider_token) as mock:
        yield mock


# =============================================================================
# Credential Manager / Dispatcher Fixtures
# =============================================================================


@pytest.fixture
def credential_manager(settings: Settings, token_storage: TokenStorage) -> CredentialManager:
    """Configured but unauthenticated credential manager."""
    manager = CredentialManager(settings=settings, storage=token_storage)
    manager.initialize()
    return manager


@pytest.fixture
def unconfigured_manager(unconfigured_settings: Settings) -> CredentialManager:
    manager = CredentialManager(settings=unconfigured_settings)
    manager.initialize()
    return manager


@pytest.fixture
def authenticated_manager(
    settings: Settings, token_storage: TokenStorage, stored_token: TokenSet
) -> CredentialManager:
    """Credential manager restored from a previously stored token."""
    token_storage.save(stored_token)
    manager = CredentialManager(settings=settings, storage=token_storage)
    manager.initialize()
    return manager


@pytest.fixture
def dispatcher(credential_manager: CredentialManager) -> ToolDispatcher:
    return ToolDispatcher(credential_manager)


@pytest.fixture
def authenticated_dispatcher(authenticated_manager: CredentialManager) -> ToolDispatcher:
    return ToolDispatcher(authenticated_manager)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {TEST_AUTH_TOKEN}"}
