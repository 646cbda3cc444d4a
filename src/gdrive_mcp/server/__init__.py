"""MCP server implementation for Google Drive.

Provides 8 Drive tools:
- list_files / search_files: browse and find files by name
- get_file_metadata: full metadata for one file
- create_folder / upload_file: create folders and text files
- download_file: read file content, exporting Google Docs, Sheets and Slides
- share_file: grant a user reader, writer or commenter access
- delete_file: move a file to the trash

Transport: Stdio (for Claude Desktop)
Authentication: OAuth 2.0 refresh token with automatic access token refresh
"""

from gdrive_mcp.server.drive_server import GoogleDriveServer, main


def create_server() -> GoogleDriveServer:
    """Create a Google Drive MCP server configured from the environment.

    Returns:
        GoogleDriveServer: Configured server instance ready to run.

    Example:
        >>> server = create_server()
        >>> asyncio.run(server.run())
    """
    return GoogleDriveServer()


__all__ = ["create_server", "GoogleDriveServer", "main"]
