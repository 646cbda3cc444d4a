"""Registry of the Drive tools advertised to MCP hosts."""

from mcp.types import Tool
from pydantic import BaseModel, Field


class ToolResult(BaseModel):
    """Text produced by a tool and whether it reports a failure."""

    text: str
    is_error: bool = False

    model_config = {"frozen": True}


class ToolDefinition(BaseModel):
    """Static description of one tool.

    Every parameter is a string; ``parameters`` maps its name to the
    description shown to the host.

    Attributes:
        name: Stable tool identifier.
        description: What the tool does.
        parameters: Ordered field name -> description.
        required: Fields the host must supply.
    """

    name: str
    description: str
    parameters: dict[str, str] = Field(default_factory=dict)
    required: tuple[str, ...] = ()

    model_config = {"frozen": True}

    def input_schema(self) -> dict:
        """JSON schema for the tool's arguments."""
        return {
            "type": "object",
            "properties": {
                field: {"type": "string", "description": description}
                for field, description in self.parameters.items()
            },
            "required": list(self.required),
        }

    def to_tool(self) -> Tool:
        """Render as an MCP Tool."""
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
        )

    def coerce_arguments(self, arguments: dict | None) -> dict[str, str]:
        """Coerce raw arguments to strings for every declared field.

        Missing or null fields become ``""``; undeclared fields are dropped.
        """
        arguments = arguments or {}
        coerced = {}
        for field in self.parameters:
            value = arguments.get(field)
            coerced[field] = "" if value is None else str(value)
        return coerced


TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="list_files",
        description="List files in Google Drive, optionally filtered by folder",
        parameters={
            "folderId": "Optional folder ID to list files from (leave empty for root)",
            "pageSize": "Number of files to return (1-100, default: 10)",
        },
    ),
    ToolDefinition(
        name="search_files",
        description="Search for files in Google Drive by name",
        parameters={
            "query": "Search query (file name to search for)",
            "pageSize": "Number of results to return (1-100, default: 10)",
        },
        required=("query",),
    ),
    ToolDefinition(
        name="get_file_metadata",
        description="Get detailed metadata about a specific file",
        parameters={
            "fileId": "The ID of the file to get metadata for",
        },
        required=("fileId",),
    ),
    ToolDefinition(
        name="create_folder",
        description="Create a new folder in Google Drive",
        parameters={
            "folderName": "Name of the folder to create",
            "parentFolderId": "Optional parent folder ID (leave empty for root)",
        },
        required=("folderName",),
    ),
    ToolDefinition(
        name="upload_file",
        description="Upload a text file to Google Drive",
        parameters={
            "fileName": "Name of the file to create",
            "content": "Content of the file",
            "mimeType": "MIME type of the file (default: text/plain)",
            "folderId": "Optional folder ID to upload to (leave empty for root)",
        },
        required=("fileName", "content"),
    ),
    ToolDefinition(
        name="download_file",
        description="Download content of a file from Google Drive",
        parameters={
            "fileId": "The ID of the file to download",
        },
        required=("fileId",),
    ),
    ToolDefinition(
        name="share_file",
        description="Share a file with a specific user via email",
        parameters={
            "fileId": "The ID of the file to share",
            "email": "Email address of the user to share with",
            "role": "Permission role: reader, writer, or commenter (default: reader)",
        },
        required=("fileId", "email"),
    ),
    ToolDefinition(
        name="delete_file",
        description="Move a file to trash in Google Drive",
        parameters={
            "fileId": "The ID of the file to delete",
        },
        required=("fileId",),
    ),
)

TOOLS_BY_NAME: dict[str, ToolDefinition] = {tool.name: tool for tool in TOOL_DEFINITIONS}
