"""Command-line interface for google-home-mcp."""

import logging
import sys

import click

from google_home_mcp.__version__ import __version__


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Google Home MCP Server - Connect Claude to Google Home devices.

    Tools:
    - get_auth_url, authenticate (Google OAuth)
    - list_devices, execute_command, query_devices, get_device_states
    """
    pass


@main.command()
def setup() -> None:
    """Authorize access to Google Home.

    This will:
    1. Print the Google consent URL
    2. Prompt for the authorization code shown after consent
    3. Store tokens at ./token.json (or GOOGLE_HOME_MCP_TOKEN_PATH)

    Requires GOOGLE_CREDENTIALS or a credentials.json file.
    """
    from google_home_mcp.auth import AuthState, CredentialManager

    manager = CredentialManager()
    manager.initialize()

    if manager.state == AuthState.UNCONFIGURED:
        click.echo("❌ Error: OAuth client credentials required")
        click.echo("")
        click.echo("Set the GOOGLE_CREDENTIALS environment variable to the client JSON,")
        click.echo(f"or save it to {manager.settings.credentials_path}")
        sys.exit(1)

    if manager.is_authenticated():
        click.echo("✓ Already authenticated!")
        click.echo(f"Token stored at: {manager.token_path}")
        click.echo("")

        if not click.confirm("Re-authenticate?"):
            return

    click.echo("Visit this URL to authorize the application:")
    click.echo(manager.get_authorization_url())
    click.echo("")
    code = click.prompt("Authorization code").strip()

    try:
        manager.exchange_code(code)
        click.echo("✓ Authentication successful!")
        click.echo(f"Token stored at: {manager.token_path}")
    except Exception as e:
        click.echo(f"❌ Authentication failed: {e}")
        sys.exit(1)


@main.command()
def mcp() -> None:
    """Start the stdio MCP server for Claude Desktop integration.

    If not yet authenticated, use the get_auth_url and authenticate
    tools from the assistant, or run 'google-home-mcp setup'.
    """
    from google_home_mcp.server import main as server_main

    try:
        click.echo("Starting Google Home MCP server...", err=True)
        server_main()
    except KeyboardInterrupt:
        click.echo("\nServer stopped.", err=True)
    except Exception as e:
        click.echo(f"❌ Server error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.option("--host", default=None, help="Bind address (default: 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Port (default: PORT or 3000)")
def serve(host: str | None, port: int | None) -> None:
    """Start the HTTP + WebSocket server.

    Requests to /mcp must carry 'Authorization: Bearer $AUTH_TOKEN'.
    """
    from google_home_mcp.server.http_server import main as http_main

    http_main(host=host, port=port)


@main.command()
def doctor() -> None:
    """Check configuration and authentication status.

    Verifies:
    1. OAuth client credentials are configured
    2. A token is stored
    3. Token expiry
    """
    from google_home_mcp.auth import AuthState, CredentialManager

    logging.basicConfig(level=logging.WARNING)

    click.echo("Google Home MCP Status:")
    click.echo("")

    manager = CredentialManager()
    manager.initialize()
    state = manager.state

    click.echo("Configuration:")
    if manager.settings.google_credentials:
        click.echo("  Client credentials: GOOGLE_CREDENTIALS")
    else:
        click.echo(f"  Client credentials: {manager.settings.credentials_path}")
    click.echo(f"  Token file: {manager.token_path}")
    has_auth_token = bool(manager.settings.auth_token.get_secret_value())
    click.echo(f"  AUTH_TOKEN set: {'yes' if has_auth_token else 'no'}")
    click.echo("")

    click.echo("Authentication:")
    if state == AuthState.UNCONFIGURED:
        click.echo("  ❌ OAuth client not configured")
        click.echo("")
        click.echo("Set GOOGLE_CREDENTIALS or provide credentials.json.")
        sys.exit(1)
    elif state == AuthState.UNAUTHENTICATED:
        click.echo("  ❌ Not authenticated")
        click.echo("")
        click.echo("Run 'google-home-mcp setup' to authenticate.")
        sys.exit(1)

    click.echo("  ✓ Authenticated")
    token = manager.token
    if token and token.expiry:
        click.echo(f"  Token expires: {token.expiry.strftime('%Y-%m-%d %H:%M:%S UTC')}")
        if token.is_expired():
            click.echo("  ⚠️  Token expired; it is not refreshed automatically")
            click.echo("  Run 'google-home-mcp setup' to re-authenticate.")
    if token:
        click.echo(f"  Scopes: {len(token.scopes)} granted")

    click.echo("")
    click.echo("✓ Ready to use!")


if __name__ == "__main__":
    main()
