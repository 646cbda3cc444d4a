"""Drive tool handlers.

Each handler validates its string arguments, issues one to three Drive
calls through the CredentialProvider's client and renders plain text.
Failures never escape: handler_boundary turns them into error results.
"""

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from gdrive_mcp.auth import CredentialProvider
from gdrive_mcp.errors import DriveMCPError, RemoteServiceError
from gdrive_mcp.formatting import (
    format_byte_size,
    format_error,
    format_timestamp,
    parse_page_size,
    require_non_empty,
)
from gdrive_mcp.server.tools import ToolResult

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
NATIVE_MIME_PREFIX = "application/vnd.google-apps."

# Export targets for native Google formats; anything else exports as text
EXPORT_MIME_TYPES = {
    "application/vnd.google-apps.document": "text/plain",
    "application/vnd.google-apps.spreadsheet": "text/csv",
    "application/vnd.google-apps.presentation": "text/plain",
}
DEFAULT_EXPORT_MIME_TYPE = "text/plain"

SHARE_ROLES = ("reader", "writer", "commenter")
DEFAULT_SHARE_ROLE = "reader"

DEFAULT_UPLOAD_MIME_TYPE = "text/plain"

LIST_FIELDS = "files(id, name, mimeType, size, modifiedTime, webViewLink, iconLink)"
SEARCH_FIELDS = "files(id, name, mimeType, size, modifiedTime, webViewLink)"

Handler = Callable[..., Awaitable[str]]


def handler_boundary(tool_name: str) -> Callable[[Handler], Callable[..., Awaitable[ToolResult]]]:
    """Wrap a handler so every failure is logged and rendered as text.

    Args:
        tool_name: Tool name used in log lines.

    Returns:
        Decorator producing a coroutine that always returns a ToolResult.
    """

    def decorator(func: Handler) -> Callable[..., Awaitable[ToolResult]]:
        @functools.wraps(func)
        async def wrapper(self: "DriveToolHandlers", arguments: dict[str, str]) -> ToolResult:
            try:
                text = await func(self, arguments)
            except RemoteServiceError as e:
                status = f" (HTTP {e.status_code})" if e.status_code else ""
                logger.error(f"Error in {tool_name}: {e.message}{status}")
                return ToolResult(text=format_error(e), is_error=True)
            except DriveMCPError as e:
                logger.error(f"Error in {tool_name}: {e.message}")
                return ToolResult(text=format_error(e), is_error=True)
            except Exception as e:
                logger.exception(f"Unexpected error in {tool_name}")
                return ToolResult(text=format_error(e), is_error=True)
            return ToolResult(text=text)

        return wrapper

    return decorator


def _render_file_entries(files: list[dict[str, Any]]) -> str:
    """Numbered listing shared by list_files and search_files."""
    lines: list[str] = []
    for index, item in enumerate(files, start=1):
        icon = "📁" if item.get("mimeType") == FOLDER_MIME_TYPE else "📄"
        lines.append(f"{index}. {icon} {item.get('name')}")
        lines.append(f"   ID: {item.get('id')}")
        lines.append(f"   Type: {item.get('mimeType')}")
        lines.append(f"   Size: {format_byte_size(item.get('size'))}")
        lines.append(f"   Modified: {format_timestamp(item.get('modifiedTime'))}")
        if item.get("webViewLink"):
            lines.append(f"   Link: {item['webViewLink']}")
        lines.append("")
    return "\n".join(lines)


class DriveToolHandlers:
    """The eight Drive operations exposed as MCP tools.

    Attributes:
        provider: Source of the authenticated Drive client.
    """

    def __init__(self, provider: CredentialProvider) -> None:
        self.provider = provider

    @handler_boundary("list_files")
    async def list_files(self, arguments: dict[str, str]) -> str:
        """List non-trashed files, newest first, optionally inside a folder."""
        folder_id = arguments.get("folderId", "").strip()
        page_size = arguments.get("pageSize", "")
        logger.info(f"Listing files, folder: {folder_id or 'root'}, pageSize: {page_size or 10}")

        client = self.provider.get_client()

        query = "trashed = false"
        if folder_id:
            query += f" and '{folder_id}' in parents"

        files = await client.list_files(
            query=query,
            page_size=parse_page_size(page_size),
            fields=LIST_FIELDS,
        )

        if not files:
            return "📁 No files found"

        return f"📁 Found {len(files)} file(s):\n\n" + _render_file_entries(files)

    @handler_boundary("search_files")
    async def search_files(self, arguments: dict[str, str]) -> str:
        """Search non-trashed files whose name contains the query."""
        logger.info(f"Searching files with query: {arguments.get('query', '')}")

        search_query = require_non_empty(arguments.get("query"), "query")
        client = self.provider.get_client()

        files = await client.list_files(
            query=f"name contains '{search_query}' and trashed = false",
            page_size=parse_page_size(arguments.get("pageSize")),
            fields=SEARCH_FIELDS,
        )

        if not files:
            return f'🔍 No files found matching "{search_query}"'

        header = f'🔍 Found {len(files)} file(s) matching "{search_query}":\n\n'
        return header + _render_file_entries(files)

    @handler_boundary("get_file_metadata")
    async def get_file_metadata(self, arguments: dict[str, str]) -> str:
        logger.info(f"Getting metadata for file: {arguments.get('fileId', '')}")

        file_id = require_non_empty(arguments.get("fileId"), "fileId")
        client = self.provider.get_client()

        item = await client.get_file(file_id, fields="*")

        lines = [
            "📄 File Metadata:",
            "",
            f"Name: {item.get('name')}",
            f"ID: {item.get('id')}",
            f"Type: {item.get('mimeType')}",
            f"Size: {format_byte_size(item.get('size'))}",
            f"Created: {format_timestamp(item.get('createdTime'))}",
            f"Modified: {format_timestamp(item.get('modifiedTime'))}",
        ]

        owners = item.get("owners") or []
        if owners:
            owner = owners[0]
            lines.append(f"Owner: {owner.get('displayName') or owner.get('emailAddress')}")
        if item.get("webViewLink"):
            lines.append(f"View Link: {item['webViewLink']}")
        if item.get("webContentLink"):
            lines.append(f"Download Link: {item['webContentLink']}")
        if item.get("description"):
            lines.append(f"Description: {item['description']}")
        if item.get("shared"):
            lines.append("Shared: Yes")

        return "\n".join(lines) + "\n"

    @handler_boundary("create_folder")
    async def create_folder(self, arguments: dict[str, str]) -> str:
        """Create a folder at the root or under parentFolderId."""
        logger.info(f"Creating folder: {arguments.get('folderName', '')}")

        folder_name = require_non_empty(arguments.get("folderName"), "folderName")
        parent_id = arguments.get("parentFolderId", "").strip()
        client = self.provider.get_client()

        metadata: dict[str, Any] = {
            "name": folder_name,
            "mimeType": FOLDER_MIME_TYPE,
        }
        if parent_id:
            metadata["parents"] = [parent_id]

        folder = await client.create_file(metadata, fields="id, name, webViewLink")

        return (
            "✅ Folder created successfully:\n"
            f"Name: {folder.get('name')}\n"
            f"ID: {folder.get('id')}\n"
            f"Link: {folder.get('webViewLink') or 'N/A'}"
        )

    @handler_boundary("upload_file")
    async def upload_file(self, arguments: dict[str, str]) -> str:
        """Create a text file with the given content."""
        logger.info(f"Uploading file: {arguments.get('fileName', '')}")

        file_name = require_non_empty(arguments.get("fileName"), "fileName")
        content = require_non_empty(arguments.get("content"), "content")
        mime_type = arguments.get("mimeType") or DEFAULT_UPLOAD_MIME_TYPE
        folder_id = arguments.get("folderId", "").strip()
        client = self.provider.get_client()

        metadata: dict[str, Any] = {"name": file_name}
        if folder_id:
            metadata["parents"] = [folder_id]

        uploaded = await client.upload_file(
            metadata,
            content=content,
            mime_type=mime_type,
            fields="id, name, webViewLink, size",
        )

        return (
            "✅ File uploaded successfully:\n"
            f"Name: {uploaded.get('name')}\n"
            f"ID: {uploaded.get('id')}\n"
            f"Size: {format_byte_size(uploaded.get('size'))}\n"
            f"Link: {uploaded.get('webViewLink') or 'N/A'}"
        )

    @handler_boundary("download_file")
    async def download_file(self, arguments: dict[str, str]) -> str:
        """Return a file's content as text, exporting native Google formats."""
        logger.info(f"Downloading file: {arguments.get('fileId', '')}")

        file_id = require_non_empty(arguments.get("fileId"), "fileId")
        client = self.provider.get_client()

        metadata = await client.get_file(file_id, fields="name, mimeType, size")
        mime_type = metadata.get("mimeType") or ""

        if mime_type.startswith(NATIVE_MIME_PREFIX):
            export_mime_type = EXPORT_MIME_TYPES.get(mime_type, DEFAULT_EXPORT_MIME_TYPE)
            content = await client.export_file(file_id, export_mime_type)
            return f"📥 File: {metadata.get('name')}\nType: {mime_type}\nContent:\n\n{content}"

        content = await client.download_file(file_id)
        return (
            f"📥 File: {metadata.get('name')}\n"
            f"Type: {mime_type}\n"
            f"Size: {format_byte_size(metadata.get('size'))}\n"
            f"Content:\n\n{content}"
        )

    @handler_boundary("share_file")
    async def share_file(self, arguments: dict[str, str]) -> str:
        """Grant a user access to a file.

        Roles outside reader/writer/commenter fall back to reader without
        an error.
        """
        logger.info(f"Sharing file {arguments.get('fileId', '')} with {arguments.get('email', '')}")

        file_id = require_non_empty(arguments.get("fileId"), "fileId")
        email = require_non_empty(arguments.get("email"), "email")
        client = self.provider.get_client()

        requested_role = arguments.get("role", "")
        role = requested_role if requested_role in SHARE_ROLES else DEFAULT_SHARE_ROLE
        if requested_role and requested_role != role:
            logger.warning(f"Unsupported role '{requested_role}', sharing as {role}")

        await client.create_permission(
            file_id,
            {"type": "user", "role": role, "emailAddress": email},
            fields="id",
        )
        file_info = await client.get_file(file_id, fields="name, webViewLink")

        return (
            "✅ File shared successfully:\n"
            f"File: {file_info.get('name')}\n"
            f"Shared with: {email}\n"
            f"Permission: {role}\n"
            f"Link: {file_info.get('webViewLink') or 'N/A'}"
        )

    @handler_boundary("delete_file")
    async def delete_file(self, arguments: dict[str, str]) -> str:
        """Move a file to the trash. Files are never permanently deleted."""
        logger.info(f"Deleting file: {arguments.get('fileId', '')}")

        file_id = require_non_empty(arguments.get("fileId"), "fileId")
        client = self.provider.get_client()

        file_info = await client.get_file(file_id, fields="name")
        await client.update_file(file_id, {"trashed": True})

        return f"✅ File moved to trash:\nName: {file_info.get('name')}\nID: {file_id}"
