"""Interactive OAuth flow that produces a refresh token for the server.

The server itself never prompts for consent: it runs headless from the
three environment variables. This flow is run once by ``gdrive-mcp setup``
to obtain the refresh token.

Environment Variables:
    GOOGLE_OAUTH_REDIRECT_URI: Redirect URI (default: http://127.0.0.1:8789/callback)
        Must be registered on the OAuth client in Google Cloud Console.
"""

import asyncio
import os
import secrets
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlparse

from google_auth_oauthlib.flow import Flow

from gdrive_mcp.auth.credential_provider import DRIVE_SCOPES, GOOGLE_TOKEN_URI
from gdrive_mcp.errors import ConfigurationError, RemoteServiceError

DEFAULT_OAUTH_HOST = "127.0.0.1"
DEFAULT_OAUTH_PORT = 8789
DEFAULT_REDIRECT_URI = "http://127.0.0.1:8789/callback"
GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"


class OAuthFlow:
    """Run the OAuth consent flow and return the granted refresh token.

    Attributes:
        client_id: Google OAuth client ID.
        client_secret: Google OAuth client secret.
        redirect_uri: Local callback URI receiving the authorization code.

    Example:
        ```python
        flow = OAuthFlow(client_id="...", client_secret="...")
        refresh_token = await flow.obtain_refresh_token()
        ```
    """

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        redirect_uri: str | None = None,
        scopes: list[str] | None = None,
    ) -> None:
        if not client_id or not client_secret:
            raise ConfigurationError(
                "Client ID and secret required. "
                "Pass as options or set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET."
            )
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri or os.environ.get(
            "GOOGLE_OAUTH_REDIRECT_URI", DEFAULT_REDIRECT_URI
        )
        self.scopes = scopes or DRIVE_SCOPES

    def client_config(self) -> dict:
        """Web-application client configuration for google-auth-oauthlib."""
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": GOOGLE_AUTH_URI,
                "token_uri": GOOGLE_TOKEN_URI,
                "redirect_uris": [self.redirect_uri],
            }
        }

    def build_flow(self) -> Flow:
        return Flow.from_client_config(
            self.client_config(),
            scopes=self.scopes,
            redirect_uri=self.redirect_uri,
        )

    async def obtain_refresh_token(self) -> str:
        """Run the consent flow and return the refresh token.

        Raises:
            RemoteServiceError: If consent is denied or Google returns no
                refresh token.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._run_flow)

    def _run_flow(self) -> str:
        """Blocking part of the flow: browser, local callback, code exchange."""
        flow = self.build_flow()
        state = secrets.token_urlsafe(32)

        # prompt=consent forces Google to issue a refresh token every time
        auth_url, _ = flow.authorization_url(
            access_type="offline",
            prompt="consent",
            state=state,
        )

        code = self._wait_for_code(auth_url, state)
        flow.fetch_token(code=code)

        refresh_token = flow.credentials.refresh_token
        if not refresh_token:
            raise RemoteServiceError(
                "Google did not return a refresh token. "
                "Revoke the app's access and run setup again."
            )
        return refresh_token

    def _wait_for_code(self, auth_url: str, state: str) -> str:
        """Open the browser and serve a single callback request.

        The callback must echo the state sent with the authorization URL;
        anything else is rejected before its code is read.
        """
        parsed = urlparse(self.redirect_uri)
        host = parsed.hostname or DEFAULT_OAUTH_HOST
        port = parsed.port or DEFAULT_OAUTH_PORT
        callback_path = parsed.path or "/callback"

        auth_code: list[str | None] = [None]
        error_message: list[str | None] = [None]
        state_mismatch = [False]

        class OAuthCallbackHandler(BaseHTTPRequestHandler):
            """HTTP handler for the OAuth redirect."""

            def log_message(self, format: str, *args) -> None:
                """Suppress HTTP server logs."""

            def _respond(self, status: int, body: bytes) -> None:
                self.send_response(status)
                self.send_header("Content-type", "text/html")
                self.end_headers()
                self.wfile.write(body)

            def do_GET(self) -> None:
                request_parsed = urlparse(self.path)
                if request_parsed.path != callback_path:
                    self._respond(404, b"Not Found")
                    return

                query_params = parse_qs(request_parsed.query)
                returned_state = query_params.get("state", [""])[0]
                if not secrets.compare_digest(returned_state.encode(), state.encode()):
                    state_mismatch[0] = True
                    self._respond(
                        400,
                        b"<html><body><h1>Authorization Failed</h1>"
                        b"<p>State mismatch. Please run setup again.</p></body></html>",
                    )
                    return

                if "error" in query_params:
                    error_message[0] = query_params["error"][0]
                    self._respond(
                        400,
                        b"<html><body><h1>Authorization Failed</h1>"
                        b"<p>Please close this window and try again.</p></body></html>",
                    )
                elif "code" in query_params:
                    auth_code[0] = query_params["code"][0]
                    self._respond(
                        200,
                        b"<html><body><h1>Authorization Successful!</h1>"
                        b"<p>You can close this window and return to the terminal.</p>"
                        b"</body></html>",
                    )
                else:
                    self._respond(
                        400,
                        b"<html><body><h1>Authorization Failed</h1>"
                        b"<p>No authorization code received.</p></body></html>",
                    )

        server = HTTPServer((host, port), OAuthCallbackHandler)
        server.timeout = 300

        print("Opening browser for Google authorization...")
        print(f"If browser doesn't open, visit: {auth_url}")
        webbrowser.open(auth_url)

        server.handle_request()
        server.server_close()

        if state_mismatch[0]:
            raise RemoteServiceError("OAuth state mismatch")
        if error_message[0]:
            raise RemoteServiceError(f"OAuth authorization failed: {error_message[0]}")
        if not auth_code[0]:
            raise RemoteServiceError("No authorization code received from Google")
        return auth_code[0]
