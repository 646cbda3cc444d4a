"""Command-line interface for gdrive-mcp."""

import asyncio
import sys

import click

from gdrive_mcp.__version__ import __version__


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Google Drive MCP Server - Connect Claude to Google Drive.

    Provides 8 tools: list, search, metadata, create folder,
    upload, download, share and trash.
    """


@main.command()
@click.option("--client-id", envvar="GOOGLE_CLIENT_ID", help="Google OAuth client ID")
@click.option("--client-secret", envvar="GOOGLE_CLIENT_SECRET", help="Google OAuth client secret")
def setup(client_id: str | None, client_secret: str | None) -> None:
    """Obtain a refresh token for the MCP server.

    This will:
    1. Open browser for the OAuth2 consent flow
    2. Exchange the authorization code for a refresh token
    3. Print the environment variables the server needs

    Requires:
    - GOOGLE_CLIENT_ID environment variable or --client-id option
    - GOOGLE_CLIENT_SECRET environment variable or --client-secret option
    """
    from gdrive_mcp.auth import OAuthFlow

    if not client_id or not client_secret:
        click.echo("❌ Error: OAuth client credentials required")
        click.echo("")
        click.echo("Set environment variables:")
        click.echo("  export GOOGLE_CLIENT_ID='your-client-id'")
        click.echo("  export GOOGLE_CLIENT_SECRET='your-client-secret'")
        click.echo("")
        click.echo("Or pass as options:")
        click.echo("  gdrive-mcp setup --client-id=... --client-secret=...")
        sys.exit(1)

    click.echo("Starting OAuth authorization flow...")
    click.echo("Browser will open for Google consent...")
    click.echo("")

    try:
        flow = OAuthFlow(client_id=client_id, client_secret=client_secret)
        refresh_token = asyncio.run(flow.obtain_refresh_token())
    except Exception as e:
        click.echo(f"❌ Authorization failed: {e}")
        click.echo("")
        click.echo("Common issues:")
        click.echo("  - Wrong client ID or client secret")
        click.echo("  - Redirect URI not registered on the OAuth client")
        click.echo("  - OAuth consent screen not configured")
        sys.exit(1)

    click.echo("✓ Authorization successful!")
    click.echo("")
    click.echo("Add these to the MCP server environment:")
    click.echo(f"  export GOOGLE_CLIENT_ID='{client_id}'")
    click.echo(f"  export GOOGLE_CLIENT_SECRET='{client_secret}'")
    click.echo(f"  export GOOGLE_REFRESH_TOKEN='{refresh_token}'")
    click.echo("")
    click.echo("Run 'gdrive-mcp doctor' to verify setup.")


@main.command()
def mcp() -> None:
    """Start the MCP server for Claude Desktop integration.

    Starts the stdio MCP server. The server starts even without
    credentials so hosts can list its tools; every tool call then
    reports a configuration error.

    This command is typically invoked by Claude Desktop via the MCP protocol.
    """
    from gdrive_mcp.server import main as server_main

    click.echo("Starting Google Drive MCP server...", err=True)
    click.echo("Server provides 8 tools for Claude Desktop", err=True)
    click.echo("", err=True)
    server_main()


@main.command()
def doctor() -> None:
    """Check installation and credential configuration.

    Verifies:
    1. Python dependencies installed
    2. OAuth client and refresh token configured
    """
    from gdrive_mcp.auth import CREDENTIAL_ENV_VARS, DriveCredentials

    click.echo("Google Drive MCP Status:")
    click.echo("")

    click.echo("Dependencies:")
    try:
        import google.auth  # noqa: F401
        import google_auth_oauthlib  # noqa: F401

        click.echo("  ✓ google-auth installed")
        click.echo("  ✓ google-auth-oauthlib installed")
    except ImportError as e:
        click.echo(f"  ❌ Missing dependency: {e}")
        sys.exit(1)

    click.echo("")

    credentials = DriveCredentials.from_env()
    missing = credentials.missing_fields()

    click.echo("Credentials:")
    for name in CREDENTIAL_ENV_VARS:
        mark = "❌" if name in missing else "✓"
        state = "not set" if name in missing else "set"
        click.echo(f"  {mark} {name} {state}")

    click.echo("")

    if missing:
        click.echo("❌ Setup required. Run 'gdrive-mcp setup' to obtain a refresh token.")
        sys.exit(1)

    click.echo("✓ Ready to use!")


if __name__ == "__main__":
    main()
