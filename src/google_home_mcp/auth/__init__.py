"""OAuth authentication for Google Home MCP.

Quick Start:
    ```python
    from google_home_mcp.auth import CredentialManager

    manager = CredentialManager()
    manager.initialize()

    print(manager.get_authorization_url())
    manager.exchange_code("4/0Ab...")

    credentials = manager.get_client()
    ```
"""

from google_home_mcp.auth.credential_manager import GOOGLE_HOME_SCOPES, CredentialManager
from google_home_mcp.auth.models import AuthState, OAuthClientConfig, TokenSet
from google_home_mcp.auth.token_storage import TokenStorage

__all__ = [
    "CredentialManager",
    "TokenStorage",
    "TokenSet",
    "OAuthClientConfig",
    "AuthState",
    "GOOGLE_HOME_SCOPES",
]
