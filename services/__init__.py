"""Services behind the MCP tools."""
from services.context import ContextService
from services.dotnet import DotNetRunner
from services.files import FileService
from services.filters import PathFilter
from services.tool_logging import ToolCallLogger, logged_tool

__all__ = [
    "ContextService",
    "DotNetRunner",
    "FileService",
    "PathFilter",
    "ToolCallLogger",
    "logged_tool",
]
