"""OAuth2 credential manager for the Google Home MCP server.

Owns the application's OAuth client identity, the persisted token set and
the derived authentication state. Client credentials are resolved from the
``GOOGLE_CREDENTIALS`` environment variable first, then from the credentials
file; when neither exists the manager stays unconfigured instead of failing,
so the authorization flow can still be started interactively.
"""

import json
import logging
import threading
from pathlib import Path

import requests
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error
from pydantic import ValidationError

from google_home_mcp.auth.models import AuthState, OAuthClientConfig, TokenSet
from google_home_mcp.auth.token_storage import TokenStorage
from google_home_mcp.config import Settings, get_settings
from google_home_mcp.errors import NotConfiguredError, UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

# Google Home OAuth scopes
GOOGLE_HOME_SCOPES = [
    "https://www.googleapis.com/auth/homegraph",
    "https://www.googleapis.com/auth/assistant-sdk-prototype",
]


class CredentialManager:
    """OAuth2 credential and token lifecycle for a single deployment.

    Only ``exchange_code`` mutates state, and it is serialized by an
    internal lock. Readers (``is_authenticated``, ``get_client``) see either
    the previous or the new credential, never a partial one.

    Attributes:
        settings: Runtime settings (credential sources, timeout).
        storage: Token store for the persisted ``TokenSet``.

    Example:
        ```python
        manager = CredentialManager()
        manager.initialize()

        if not manager.is_authenticated():
            print(manager.get_authorization_url())
            manager.exchange_code(input("Code: "))

        credentials = manager.get_client()
        ```
    """

    def __init__(
        self, settings: Settings | None = None, storage: TokenStorage | None = None
    ) -> None:
        self.settings = settings or get_settings()
        self.storage = storage or TokenStorage(self.settings.token_path)
        self._client_config: OAuthClientConfig | None = None
        self._credentials: Credentials | None = None
        self._token: TokenSet | None = None
        self._lock = threading.Lock()

    @property
    def token_path(self) -> Path:
        return self.storage.token_path

    @property
    def token(self) -> TokenSet | None:
        """The token set currently held, if any."""
        return self._token

    @property
    def state(self) -> AuthState:
        if self._client_config is None:
            return AuthState.UNCONFIGURED
        if self.is_authenticated():
            return AuthState.AUTHENTICATED
        return AuthState.UNAUTHENTICATED

    def initialize(self) -> None:
        """Load the OAuth client identity and any previously stored token.

        Never raises for missing or malformed credentials; the manager is
        left unconfigured and the problem is logged.
        """
        try:
            client_config = self._load_client_config()
        except NotConfiguredError as e:
            logger.error(f"Failed to initialize Google Auth: {e}")
            return

        if client_config is None:
            logger.info(
                "No credentials found. Set GOOGLE_CREDENTIALS or provide "
                f"{self.settings.credentials_path}"
            )
            return

        self._client_config = client_config
        token = self.storage.load()
        self._publish(client_config, token)

        if token is None:
            logger.info("No token found, authorization required")
        else:
            logger.info(f"Restored Google token from {self.storage.token_path}")

    def _load_client_config(self) -> OAuthClientConfig | None:
        """Resolve the client secrets document from env or file.

        Returns:
            OAuthClientConfig, or None if no source is present.

        Raises:
            NotConfiguredError: If a source exists but cannot be used.
        """
        if self.settings.google_credentials:
            raw = self.settings.google_credentials
            source = "GOOGLE_CREDENTIALS"
        else:
            path = self.settings.credentials_path
            if not path.exists():
                return None
            try:
                raw = path.read_text()
            except OSError as e:
                raise NotConfiguredError(f"Cannot read {path}: {e}") from e
            source = str(path)

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise NotConfiguredError(f"{source} is not valid JSON: {e}") from e

        return OAuthClientConfig.from_client_secrets(data)

    def _require_client_config(self) -> OAuthClientConfig:
        client_config = self._client_config
        if client_config is None:
            raise NotConfiguredError()
        return client_config

    def _build_flow(self, client_config: OAuthClientConfig) -> Flow:
        # No PKCE verifier: the code may be exchanged by a later process than
        # the one that produced the authorization URL.
        return Flow.from_client_config(
            client_config.to_client_config(),
            scopes=GOOGLE_HOME_SCOPES,
            redirect_uri=client_config.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def _publish(self, client_config: OAuthClientConfig, token: TokenSet | None) -> None:
        """Swap in a new credential handle built from ``token``."""
        expiry = token.expiry if token else None
        credentials = Credentials(  # nosec B106 - token_uri is public Google OAuth endpoint
            token=token.access_token if token else None,
            refresh_token=token.refresh_token if token else None,
            token_uri=client_config.token_uri,
            client_id=client_config.client_id,
            client_secret=client_config.client_secret,
            scopes=(token.scopes if token and token.scopes else GOOGLE_HOME_SCOPES),
            # google-auth compares expiry against naive UTC
            expiry=expiry.replace(tzinfo=None) if expiry else None,
        )
        self._token = token
        self._credentials = credentials

    def get_authorization_url(self) -> str:
        """Build the Google consent URL requesting offline access.

        Returns:
            Authorization URL for the Google Home scopes.

        Raises:
            NotConfiguredError: If no OAuth client is loaded.
        """
        flow = self._build_flow(self._require_client_config())
        auth_url, _ = flow.authorization_url(access_type="offline")
        return auth_url

    def exchange_code(self, code: str) -> TokenSet:
        """Exchange an authorization code for tokens and persist them.

        The token file is written before the new credential is published,
        so a failed exchange or write leaves both unchanged.

        Args:
            code: Authorization code returned by Google's consent screen.

        Returns:
            The newly granted TokenSet.

        Raises:
            NotConfiguredError: If no OAuth client is loaded.
            UpstreamTimeoutError: If Google does not answer within the timeout.
            UpstreamError: If Google rejects the code or the request fails.
        """
        client_config = self._require_client_config()
        timeout = self.settings.request_timeout

        with self._lock:
            flow = self._build_flow(client_config)
            try:
                raw = flow.fetch_token(code=code, timeout=timeout)
            except requests.exceptions.Timeout as e:
                raise UpstreamTimeoutError(f"Token exchange timed out after {timeout}s") from e
            except (OAuth2Error, requests.exceptions.RequestException) as e:
                raise UpstreamError(f"Token exchange failed: {e}") from e

            try:
                token = TokenSet.from_provider(raw)
            except ValidationError as e:
                problems = "; ".join(error["msg"] for error in e.errors())
                raise UpstreamError(f"Token exchange returned an invalid token: {problems}") from e
            self.storage.save(token)
            self._publish(client_config, token)

        logger.info("Successfully authenticated with Google")
        return token

    def is_authenticated(self) -> bool:
        """True iff an OAuth client exists and holds an access token.

        Token expiry is not checked.
        """
        credentials = self._credentials
        return credentials is not None and bool(credentials.token)

    def get_client(self) -> Credentials:
        """Return the live Google credential for API clients.

        Raises:
            NotConfiguredError: If no OAuth client is loaded.
        """
        self._require_client_config()
        credentials = self._credentials
        if credentials is None:
            raise NotConfiguredError()
        return credentials
