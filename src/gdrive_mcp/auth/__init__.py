"""OAuth credentials for the Google Drive MCP server.

Quick Start:
    ```python
    from gdrive_mcp.auth import CredentialProvider, DriveCredentials

    provider = CredentialProvider(DriveCredentials.from_env())
    client = provider.get_client()
    ```
"""

from gdrive_mcp.auth.credential_provider import DRIVE_SCOPES, CredentialProvider
from gdrive_mcp.auth.models import CREDENTIAL_ENV_VARS, DriveCredentials
from gdrive_mcp.auth.oauth_flow import OAuthFlow

__all__ = [
    "CredentialProvider",
    "DriveCredentials",
    "OAuthFlow",
    "CREDENTIAL_ENV_VARS",
    "DRIVE_SCOPES",
]
