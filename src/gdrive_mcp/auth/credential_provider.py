"""Build authenticated Drive clients from configured OAuth credentials."""

import logging

from google.oauth2.credentials import Credentials

from gdrive_mcp.auth.models import DriveCredentials
from gdrive_mcp.client import DriveClient
from gdrive_mcp.errors import ConfigurationError

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

DRIVE_SCOPES = [
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/drive.file",
]

MISSING_CREDENTIALS_MESSAGE = (
    "Missing Google Drive credentials. "
    "Set GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, and GOOGLE_REFRESH_TOKEN"
)


class CredentialProvider:
    """Produce a DriveClient for the configured OAuth credentials.

    The client is built on first use and reused afterwards. Building it
    performs no network I/O; the access token is fetched with the refresh
    token on the first Drive request.

    Attributes:
        credentials: Immutable credential configuration.

    Example:
        ```python
        provider = CredentialProvider(DriveCredentials.from_env())
        client = provider.get_client()
        files = await client.list_files("trashed = false", 10, "files(id, name)")
        ```
    """

    def __init__(self, credentials: DriveCredentials) -> None:
        self.credentials = credentials
        self._client: DriveClient | None = None

    def _build_google_credentials(self) -> Credentials:
        """Convert the configuration into google-auth Credentials."""
        return Credentials(  # nosec B106 - token_uri is public Google OAuth endpoint
            token=None,
            refresh_token=self.credentials.refresh_token.get_secret_value(),
            client_id=self.credentials.client_id,
            client_secret=self.credentials.client_secret.get_secret_value(),
            token_uri=GOOGLE_TOKEN_URI,
            scopes=DRIVE_SCOPES,
        )

    def get_client(self) -> DriveClient:
        """Return the shared authenticated Drive client.

        Raises:
            ConfigurationError: If any of the three credentials is empty.
        """
        if not self.credentials.is_complete:
            raise ConfigurationError(MISSING_CREDENTIALS_MESSAGE)

        if self._client is None:
            logger.debug("Creating Drive client")
            self._client = DriveClient(self._build_google_credentials())
        return self._client

    async def close(self) -> None:
        """Release the shared client, if one was built."""
        if self._client is not None:
            await self._client.close()
            self._client = None
