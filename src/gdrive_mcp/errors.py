"""Error taxonomy for the Google Drive MCP server.

Every error raised while serving a tool call derives from DriveMCPError and
carries a human-readable ``message`` that is safe to show to the host: it
never contains credential values or tracebacks.
"""


class DriveMCPError(Exception):
    """Base class for all gdrive-mcp errors.

    Attributes:
        message: Description rendered to the user by format_error().
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(DriveMCPError):
    """OAuth client id, client secret or refresh token is not configured."""


class ValidationError(DriveMCPError):
    """A required tool argument is missing or blank."""


class UnknownToolError(DriveMCPError):
    """An invocation referenced a tool name that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.tool_name = name


class RemoteServiceError(DriveMCPError):
    """Any failure reported by the Drive API, the network or token refresh.

    Attributes:
        status_code: HTTP status when the failure came from a response. Logged
            with the error; never part of the rendered message.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ToolExecutionError(Exception):
    """Raised from the MCP call_tool handler to flag a result as an error.

    The SDK converts it into a CallToolResult with ``isError=True`` whose
    text is ``str(exc)``, so the already-formatted text is passed through.
    """
