"""Runtime configuration for the Google Home MCP server.

Environment Variables:
    GOOGLE_CREDENTIALS: OAuth client JSON (``installed`` or ``web`` shape).
        Takes precedence over the credentials file.
    GOOGLE_HOME_MCP_CREDENTIALS_PATH: OAuth client JSON file (default: ./credentials.json)
    GOOGLE_HOME_MCP_TOKEN_PATH: Persisted token file (default: ./token.json)
    AUTH_TOKEN: Bearer secret required by the HTTP and function transports
    PORT: HTTP server port (default: 3000)
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORT = 3000
DEFAULT_REQUEST_TIMEOUT = 30.0


class Settings(BaseSettings):
    """Settings loaded from the environment and an optional .env file."""

    google_credentials: str | None = Field(default=None, alias="GOOGLE_CREDENTIALS")
    credentials_path: Path = Field(default_factory=lambda: Path.cwd() / "credentials.json")
    token_path: Path = Field(default_factory=lambda: Path.cwd() / "token.json")

    auth_token: SecretStr = Field(default=SecretStr(""), alias="AUTH_TOKEN")
    host: str = "0.0.0.0"  # nosec B104
    port: int = Field(default=DEFAULT_PORT, alias="PORT")

    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_HOME_MCP_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
