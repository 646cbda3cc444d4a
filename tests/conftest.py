"""Shared pytest fixtures for gdrive-mcp tests.

This module provides reusable fixtures for credentials, a mocked Drive
client and the tool handlers wired to it.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import SecretStr

from gdrive_mcp.auth import CredentialProvider, DriveCredentials
from gdrive_mcp.client import DriveClient
from gdrive_mcp.server.handlers import DriveToolHandlers

# =============================================================================
# Credential Fixtures
# =============================================================================


@pytest.fixture
def drive_credentials() -> DriveCredentials:
    """Complete OAuth configuration."""
    return DriveCredentials(
        client_id="test-client-id.apps.googleusercontent.com",
        client_secret=SecretStr("test_client_secret_abc123"),
        refresh_token=SecretStr("test_refresh_token_xyz789"),
    )


@pytest.fixture
def incomplete_credentials() -> DriveCredentials:
    """Configuration with the refresh token missing."""
    return DriveCredentials(
        client_id="test-client-id.apps.googleusercontent.com",
        client_secret=SecretStr("test_client_secret_abc123"),
    )


# =============================================================================
# Drive Client Fixtures
# =============================================================================


@pytest.fixture
def mock_drive_client() -> AsyncMock:
    """DriveClient mock; every API method is an AsyncMock."""
    client = AsyncMock(spec=DriveClient)
    client.list_files.return_value = []
    return client


@pytest.fixture
def provider(drive_credentials: DriveCredentials, mock_drive_client: AsyncMock, monkeypatch):
    """CredentialProvider whose client is the mock."""
    provider = CredentialProvider(drive_credentials)
    monkeypatch.setattr(provider, "get_client", MagicMock(return_value=mock_drive_client))
    return provider


@pytest.fixture
def handlers(provider: CredentialProvider) -> DriveToolHandlers:
    """Tool handlers wired to the mock Drive client."""
    return DriveToolHandlers(provider)

