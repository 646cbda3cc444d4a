"""Async client for the Google Drive v3 REST API.

Wraps a shared httpx.AsyncClient and a google-auth Credentials object that
refreshes its access token on demand. Every failure surfaces as a
RemoteServiceError carrying the message Drive returned.
"""

import asyncio
import json
import logging
from typing import Any
from urllib.parse import quote

import httpx
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from gdrive_mcp.errors import RemoteServiceError

logger = logging.getLogger(__name__)

DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_BASE = "https://www.googleapis.com/upload/drive/v3"

MULTIPART_BOUNDARY = "gdrive_mcp_boundary"


def _error_message(response: httpx.Response) -> str:
    """Extract the Drive error message from a failed response."""
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return body.get("error_description") or error
    return f"{response.status_code} {response.reason_phrase}".strip()


class DriveClient:
    """Minimal Drive v3 client used by the tool handlers.

    Attributes:
        credentials: google-auth credentials holding the refresh token.
    """

    def __init__(
        self,
        credentials: Credentials,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            credentials: OAuth credentials; refreshed lazily before requests.
            http_client: Optional pre-built httpx client (tests inject one).
        """
        self.credentials = credentials
        self._http_client = http_client

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client with connection pooling."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                http2=True,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
                timeout=httpx.Timeout(30.0, connect=10.0),
            )
        return self._http_client

    async def close(self) -> None:
        """Close the shared HTTP client and release resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _get_access_token(self) -> str:
        """Return a valid access token, refreshing it if needed.

        Raises:
            RemoteServiceError: If Google rejects the refresh token.
        """
        if not self.credentials.valid:
            logger.info("Refreshing Google access token")
            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(None, self.credentials.refresh, Request())
            except RefreshError as e:
                raise RemoteServiceError(f"Token refresh failed: {e}") from e
        return self.credentials.token

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Make an authenticated request and translate failures.

        Returns:
            The successful httpx.Response.

        Raises:
            RemoteServiceError: On any HTTP, transport or auth failure.
        """
        access_token = await self._get_access_token()
        client = self._get_http_client()

        request_headers = {"Authorization": f"Bearer {access_token}"}
        if headers:
            request_headers.update(headers)

        kwargs: dict[str, Any] = {
            "method": method,
            "url": url,
            "params": params,
            "headers": request_headers,
        }
        if json_data is not None:
            kwargs["json"] = json_data
        if content is not None:
            kwargs["content"] = content
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = await client.request(**kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteServiceError(
                _error_message(e.response), status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise RemoteServiceError(str(e) or type(e).__name__) from e
        return response

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        response = await self._request(method, url, **kwargs)
        result: dict[str, Any] = response.json()
        return result

    @staticmethod
    def _file_url(file_id: str) -> str:
        return f"{DRIVE_API_BASE}/files/{quote(file_id, safe='')}"

    async def list_files(
        self,
        query: str,
        page_size: int,
        fields: str,
        order_by: str = "modifiedTime desc",
    ) -> list[dict[str, Any]]:
        """List files matching a Drive query.

        Args:
            query: Drive search expression (``q`` parameter).
            page_size: Maximum number of files to return.
            fields: Field projection, e.g. ``files(id, name)``.
            order_by: Sort order.

        Returns:
            List of file records (possibly empty).
        """
        params = {
            "q": query,
            "pageSize": page_size,
            "fields": fields,
            "orderBy": order_by,
        }
        response = await self._request_json("GET", f"{DRIVE_API_BASE}/files", params=params)
        files: list[dict[str, Any]] = response.get("files") or []
        return files

    async def get_file(self, file_id: str, fields: str) -> dict[str, Any]:
        """Fetch metadata for a single file."""
        return await self._request_json("GET", self._file_url(file_id), params={"fields": fields})

    async def create_file(self, metadata: dict[str, Any], fields: str) -> dict[str, Any]:
        """Create a metadata-only file such as a folder."""
        return await self._request_json(
            "POST", f"{DRIVE_API_BASE}/files", params={"fields": fields}, json_data=metadata
        )

    async def upload_file(
        self,
        metadata: dict[str, Any],
        content: str,
        mime_type: str,
        fields: str,
    ) -> dict[str, Any]:
        """Create a file with a text body using a multipart upload.

        Args:
            metadata: File metadata (name, optional parents).
            content: Text body of the file.
            mime_type: MIME type of the body.
            fields: Field projection for the response.

        Returns:
            Created file record.
        """
        body_parts = [
            f"--{MULTIPART_BOUNDARY}",
            "Content-Type: application/json; charset=UTF-8",
            "",
            json.dumps(metadata),
            f"--{MULTIPART_BOUNDARY}",
            f"Content-Type: {mime_type}",
            "",
            content,
            f"--{MULTIPART_BOUNDARY}--",
        ]
        body = "\r\n".join(body_parts)

        return await self._request_json(
            "POST",
            f"{DRIVE_UPLOAD_BASE}/files",
            params={"uploadType": "multipart", "fields": fields},
            content=body.encode("utf-8"),
            headers={"Content-Type": f"multipart/related; boundary={MULTIPART_BOUNDARY}"},
            timeout=60.0,
        )

    async def export_file(self, file_id: str, mime_type: str) -> str:
        """Export a native Google document to the given MIME type as text."""
        response = await self._request(
            "GET", f"{self._file_url(file_id)}/export", params={"mimeType": mime_type}
        )
        return response.text

    async def download_file(self, file_id: str) -> str:
        """Download the raw content of a regular file as text."""
        response = await self._request("GET", self._file_url(file_id), params={"alt": "media"})
        return response.text

    async def create_permission(
        self, file_id: str, permission: dict[str, Any], fields: str = "id"
    ) -> dict[str, Any]:
        """Grant a permission on a file."""
        return await self._request_json(
            "POST",
            f"{self._file_url(file_id)}/permissions",
            params={"fields": fields},
            json_data=permission,
        )

    async def update_file(
        self, file_id: str, body: dict[str, Any], fields: str = "id"
    ) -> dict[str, Any]:
        """Patch file metadata (used to set the trashed flag)."""
        return await self._request_json(
            "PATCH", self._file_url(file_id), params={"fields": fields}, json_data=body
        )
