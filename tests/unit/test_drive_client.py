"""Unit tests for the Drive REST client.

The shared httpx client is replaced by a mock whose ``request`` coroutine
records the outgoing call and returns a canned response.
"""

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from google.auth.exceptions import RefreshError

from gdrive_mcp.client import DRIVE_API_BASE, DRIVE_UPLOAD_BASE, DriveClient
from gdrive_mcp.errors import RemoteServiceError


def create_mock_response(
    json_data: dict[str, Any] | None = None,
    status_code: int = 200,
    text: str = "",
) -> MagicMock:
    """Create a mock httpx Response object."""
    mock_response = MagicMock(spec=httpx.Response)
    mock_response.status_code = status_code
    mock_response.reason_phrase = "OK" if status_code < 400 else "Not Found"
    mock_response.json.return_value = json_data if json_data is not None else {}
    mock_response.text = text

    if status_code >= 400:
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            f"{status_code} error", request=MagicMock(), response=mock_response
        )
    return mock_response


@pytest.fixture
def google_credentials() -> MagicMock:
    """google-auth credentials that already hold a valid token."""
    credentials = MagicMock()
    credentials.valid = True
    credentials.token = "mock_access_token_12345"
    return credentials


@pytest.fixture
def http_client() -> MagicMock:
    """Mock httpx.AsyncClient."""
    client = MagicMock(spec=httpx.AsyncClient)
    client.request = AsyncMock(return_value=create_mock_response({}))
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def drive_client(google_credentials: MagicMock, http_client: MagicMock) -> DriveClient:
    return DriveClient(google_credentials, http_client=http_client)


@pytest.mark.unit
class TestDriveClientRequests:
    """Tests for the request shapes sent to the Drive API."""

    @pytest.mark.asyncio
    async def test_list_files_sends_query_and_projection(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify q, pageSize, fields and orderBy are forwarded."""
        http_client.request.return_value = create_mock_response(
            {"files": [{"id": "file_001", "name": "notes.txt"}]}
        )

        files = await drive_client.list_files(
            query="trashed = false", page_size=5, fields="files(id, name)"
        )

        assert files == [{"id": "file_001", "name": "notes.txt"}]
        kwargs = http_client.request.call_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == f"{DRIVE_API_BASE}/files"
        assert kwargs["params"] == {
            "q": "trashed = false",
            "pageSize": 5,
            "fields": "files(id, name)",
            "orderBy": "modifiedTime desc",
        }
        assert kwargs["headers"]["Authorization"] == "Bearer mock_access_token_12345"

    @pytest.mark.asyncio
    async def test_list_files_handles_missing_files_key(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify an empty response yields an empty list."""
        http_client.request.return_value = create_mock_response({})

        assert await drive_client.list_files("trashed = false", 10, "files(id)") == []

    @pytest.mark.asyncio
    async def test_get_file_encodes_id_in_path(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify file ids are percent-encoded in the URL path."""
        http_client.request.return_value = create_mock_response({"id": "a/b"})

        await drive_client.get_file("a/b", fields="name")

        kwargs = http_client.request.call_args.kwargs
        assert kwargs["url"] == f"{DRIVE_API_BASE}/files/a%2Fb"
        assert kwargs["params"] == {"fields": "name"}

    @pytest.mark.asyncio
    async def test_create_file_posts_metadata(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify folder creation posts JSON metadata."""
        http_client.request.return_value = create_mock_response({"id": "folder_001"})
        metadata = {"name": "Reports", "mimeType": "application/vnd.google-apps.folder"}

        result = await drive_client.create_file(metadata, fields="id, name, webViewLink")

        assert result == {"id": "folder_001"}
        kwargs = http_client.request.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["json"] == metadata

    @pytest.mark.asyncio
    async def test_upload_file_sends_multipart_body(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify uploads use the multipart endpoint with metadata and body."""
        http_client.request.return_value = create_mock_response({"id": "file_002"})

        await drive_client.upload_file(
            {"name": "notes.txt", "parents": ["folder_001"]},
            content="hello world",
            mime_type="text/markdown",
            fields="id, name",
        )

        kwargs = http_client.request.call_args.kwargs
        assert kwargs["url"] == f"{DRIVE_UPLOAD_BASE}/files"
        assert kwargs["params"]["uploadType"] == "multipart"
        assert kwargs["headers"]["Content-Type"].startswith("multipart/related; boundary=")
        body = kwargs["content"].decode("utf-8")
        assert json.dumps({"name": "notes.txt", "parents": ["folder_001"]}) in body
        assert "Content-Type: text/markdown" in body
        assert "hello world" in body

    @pytest.mark.asyncio
    async def test_export_file_requests_target_format(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify export calls the export endpoint with the target MIME type."""
        http_client.request.return_value = create_mock_response(text="a,b\n1,2\n")

        content = await drive_client.export_file("sheet_001", "text/csv")

        assert content == "a,b\n1,2\n"
        kwargs = http_client.request.call_args.kwargs
        assert kwargs["url"] == f"{DRIVE_API_BASE}/files/sheet_001/export"
        assert kwargs["params"] == {"mimeType": "text/csv"}

    @pytest.mark.asyncio
    async def test_download_file_uses_media_alt(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify raw downloads request alt=media."""
        http_client.request.return_value = create_mock_response(text="plain text")

        assert await drive_client.download_file("file_001") == "plain text"
        assert http_client.request.call_args.kwargs["params"] == {"alt": "media"}

    @pytest.mark.asyncio
    async def test_update_file_patches_body(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify updates use PATCH with a JSON body."""
        await drive_client.update_file("file_001", {"trashed": True})

        kwargs = http_client.request.call_args.kwargs
        assert kwargs["method"] == "PATCH"
        assert kwargs["json"] == {"trashed": True}

    @pytest.mark.asyncio
    async def test_create_permission_posts_to_permissions(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify permissions are created on the file's permissions collection."""
        permission = {"type": "user", "role": "reader", "emailAddress": "bob@example.com"}

        await drive_client.create_permission("file_001", permission)

        kwargs = http_client.request.call_args.kwargs
        assert kwargs["url"] == f"{DRIVE_API_BASE}/files/file_001/permissions"
        assert kwargs["json"] == permission

    def test_has_no_permanent_delete(self) -> None:
        """Verify the client offers no way to permanently delete files."""
        assert not hasattr(DriveClient, "delete_file")


@pytest.mark.unit
class TestDriveClientErrors:
    """Tests for translation of failures into RemoteServiceError."""

    @pytest.mark.asyncio
    async def test_should_use_drive_error_message(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify the JSON error message from Drive is surfaced."""
        http_client.request.return_value = create_mock_response(
            {"error": {"code": 404, "message": "File not found: missing_id."}},
            status_code=404,
        )

        with pytest.raises(RemoteServiceError) as exc_info:
            await drive_client.get_file("missing_id", fields="name")

        assert exc_info.value.message == "File not found: missing_id."
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_should_fall_back_to_status_line(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify non-JSON error bodies render the HTTP status."""
        response = create_mock_response(status_code=404)
        response.json.side_effect = ValueError("not json")
        http_client.request.return_value = response

        with pytest.raises(RemoteServiceError) as exc_info:
            await drive_client.download_file("file_001")

        assert exc_info.value.message == "404 Not Found"

    @pytest.mark.asyncio
    async def test_should_wrap_transport_errors(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify network failures become RemoteServiceError."""
        http_client.request.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(RemoteServiceError) as exc_info:
            await drive_client.list_files("trashed = false", 10, "files(id)")

        assert "connection refused" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_should_wrap_refresh_errors(
        self, google_credentials: MagicMock, http_client: MagicMock
    ) -> None:
        """Verify a rejected refresh token becomes RemoteServiceError."""
        google_credentials.valid = False
        google_credentials.refresh.side_effect = RefreshError("invalid_grant")
        client = DriveClient(google_credentials, http_client=http_client)

        with pytest.raises(RemoteServiceError) as exc_info:
            await client.get_file("file_001", fields="name")

        assert exc_info.value.message == "Token refresh failed: invalid_grant"
        http_client.request.assert_not_called()


@pytest.mark.unit
class TestDriveClientLifecycle:
    """Tests for token refresh and connection handling."""

    @pytest.mark.asyncio
    async def test_should_refresh_invalid_token_before_request(
        self, google_credentials: MagicMock, http_client: MagicMock
    ) -> None:
        """Verify an expired or missing token is refreshed first."""
        google_credentials.valid = False
        client = DriveClient(google_credentials, http_client=http_client)

        await client.get_file("file_001", fields="name")

        google_credentials.refresh.assert_called_once()

    @pytest.mark.asyncio
    async def test_should_not_refresh_valid_token(
        self, drive_client: DriveClient, google_credentials: MagicMock
    ) -> None:
        """Verify valid tokens are reused."""
        await drive_client.get_file("file_001", fields="name")

        google_credentials.refresh.assert_not_called()

    @pytest.mark.asyncio
    async def test_close_releases_http_client(
        self, drive_client: DriveClient, http_client: MagicMock
    ) -> None:
        """Verify close() closes the shared httpx client once."""
        await drive_client.close()
        await drive_client.close()

        http_client.aclose.assert_awaited_once()
