"""Google Drive MCP Server.

Expose Google Drive file operations (list, search, metadata, folders,
upload, download, sharing and trash) to MCP hosts such as Claude Desktop.
"""

from gdrive_mcp.__version__ import __version__

__all__ = ["__version__"]
