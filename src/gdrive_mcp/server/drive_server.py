"""Google Drive MCP server for Claude Desktop integration.

This MCP server exposes eight Google Drive tools (list, search, metadata,
create folder, upload, download, share, trash) over stdio. OAuth
credentials are read once from GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET and
GOOGLE_REFRESH_TOKEN; the access token is refreshed automatically.

All logging goes to stderr so it never mixes with protocol traffic on
stdout.
"""

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from gdrive_mcp.__version__ import __version__
from gdrive_mcp.auth import CredentialProvider, DriveCredentials
from gdrive_mcp.errors import ToolExecutionError, UnknownToolError
from gdrive_mcp.formatting import format_error
from gdrive_mcp.server.handlers import DriveToolHandlers
from gdrive_mcp.server.tools import TOOL_DEFINITIONS, TOOLS_BY_NAME, ToolResult

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

SERVER_NAME = "google-drive"


class GoogleDriveServer:
    """MCP server for Google Drive.

    Advertises the static tool registry and routes each call to exactly one
    DriveToolHandlers method.

    Attributes:
        server: MCP Server instance.
        credentials: Immutable OAuth configuration.
        provider: Builds the authenticated Drive client on demand.
        handlers: Tool handler implementations.
    """

    def __init__(self, credentials: DriveCredentials | None = None) -> None:
        """Initialize the Google Drive MCP server.

        Args:
            credentials: OAuth configuration. Read from the environment when
                not provided.
        """
        self.server = Server(SERVER_NAME, version=__version__)
        self.credentials = credentials if credentials is not None else DriveCredentials.from_env()
        self.provider = CredentialProvider(self.credentials)
        self.handlers = DriveToolHandlers(self.provider)
        self._handler_table: dict[str, Callable[[dict[str, str]], Awaitable[ToolResult]]] = {
            "list_files": self.handlers.list_files,
            "search_files": self.handlers.search_files,
            "get_file_metadata": self.handlers.get_file_metadata,
            "create_folder": self.handlers.create_folder,
            "upload_file": self.handlers.upload_file,
            "download_file": self.handlers.download_file,
            "share_file": self.handlers.share_file,
            "delete_file": self.handlers.delete_file,
        }
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Register MCP tool handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            """Return list of available tools."""
            return [definition.to_tool() for definition in TOOL_DEFINITIONS]

        # Required fields are checked by the handlers so blank and missing
        # values produce the same validation message
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            """Handle tool calls."""
            result = await self.dispatch(name, arguments)
            if result.is_error:
                raise ToolExecutionError(result.text)
            return [TextContent(type="text", text=result.text)]

    async def dispatch(self, name: str, arguments: dict[str, Any] | None) -> ToolResult:
        """Dispatch a tool call to its handler.

        Args:
            name: Tool name.
            arguments: Raw tool arguments.

        Returns:
            The handler's result, or an error result for unknown tools.
        """
        handler = self._handler_table.get(name)
        definition = TOOLS_BY_NAME.get(name)
        if handler is None or definition is None:
            error = UnknownToolError(name)
            logger.error(f"Error executing tool {name}: {error.message}")
            return ToolResult(text=format_error(error), is_error=True)

        return await handler(definition.coerce_arguments(arguments))

    async def close(self) -> None:
        """Release the Drive client and its HTTP connections."""
        await self.provider.close()

    async def run(self) -> None:
        """Run the MCP server using stdio transport."""
        try:
            async with stdio_server() as (read_stream, write_stream):
                logger.info("Google Drive MCP server running on stdio")
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.close()


def main() -> None:
    """Entry point for the Google Drive MCP server."""
    logger.info("Starting Google Drive MCP server...")
    credentials = DriveCredentials.from_env()
    if not credentials.is_complete:
        logger.warning("Google Drive credentials not fully configured")
        logger.warning(f"Missing: {', '.join(credentials.missing_fields())}")

    server = GoogleDriveServer(credentials)
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
