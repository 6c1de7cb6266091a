"""Data models for Google OAuth client identity and granted tokens."""

import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from google_home_mcp.errors import NotConfiguredError

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"  # nosec B105


class AuthState(str, Enum):
    """Derived authentication state of the credential manager."""

    UNCONFIGURED = "unconfigured"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class OAuthClientConfig(BaseModel):
    """The application's OAuth2 client identity.

    Attributes:
        client_id: Google OAuth client ID.
        client_secret: Google OAuth client secret.
        redirect_uri: First redirect URI registered for the client.
        auth_uri: Authorization endpoint.
        token_uri: Token endpoint.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str
    redirect_uri: str
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI

    @classmethod
    def from_client_secrets(cls, data: dict[str, Any]) -> "OAuthClientConfig":
        """Build from a Google client secrets document.

        Args:
            data: Parsed JSON with an ``installed`` or ``web`` object.

        Returns:
            OAuthClientConfig using the first redirect URI.

        Raises:
            NotConfiguredError: If the document is not a usable client secret.
        """
        section = (data.get("installed") or data.get("web")) if isinstance(data, dict) else None
        if not isinstance(section, dict):
            raise NotConfiguredError("Credentials must contain an 'installed' or 'web' object")

        redirect_uris = section.get("redirect_uris") or []
        if not isinstance(redirect_uris, list) or not redirect_uris:
            raise NotConfiguredError("Credentials must list at least one redirect URI")

        try:
            return cls(
                client_id=section.get("client_id"),
                client_secret=section.get("client_secret"),
                redirect_uri=redirect_uris[0],
                auth_uri=section.get("auth_uri") or GOOGLE_AUTH_URI,
                token_uri=section.get("token_uri") or GOOGLE_TOKEN_URI,
            )
        except ValidationError as e:
            raise NotConfiguredError(f"Invalid OAuth client credentials: {e}") from e

    def to_client_config(self) -> dict[str, Any]:
        """Return the ``web`` client config shape expected by google-auth-oauthlib."""
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": self.auth_uri,
                "token_uri": self.token_uri,
                "redirect_uris": [self.redirect_uri],
            }
        }


class TokenSet(BaseModel):
    """Tokens granted by a successful authorization code exchange.

    Unknown provider fields (``id_token`` and the like) are kept so the
    persisted file holds the raw provider response.
    """

    model_config = ConfigDict(extra="allow")

    access_token: str
    refresh_token: str | None = None
    expires_at: float | None = Field(default=None, description="Expiry as epoch seconds")
    scope: str | None = None
    token_type: str | None = "Bearer"

    @classmethod
    def from_provider(cls, raw: dict[str, Any]) -> "TokenSet":
        """Normalize a token response from the OAuth provider."""
        data = dict(raw)
        scope = data.get("scope")
        if isinstance(scope, list | tuple):
            data["scope"] = " ".join(scope)
        if data.get("expires_at") is None and data.get("expires_in") is not None:
            data["expires_at"] = time.time() + float(data["expires_in"])
        return cls.model_validate(data)

    @property
    def scopes(self) -> list[str]:
        return self.scope.split() if self.scope else []

    @property
    def expiry(self) -> datetime | None:
        """Expiry as a timezone-aware datetime, if known."""
        if self.expires_at is None:
            return None
        return datetime.fromtimestamp(self.expires_at, tz=timezone.utc)

    def is_expired(self, buffer_seconds: int = 60) -> bool:
        """Check whether the access token has expired.

        Tokens without a known expiry are never reported as expired.
        """
        if self.expires_at is None:
            return False
        return time.time() >= self.expires_at - buffer_seconds
