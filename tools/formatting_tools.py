"""Formatting tools: dotnet format for single files and directories."""
import logging
from mcp.server.fastmcp import FastMCP

from services.tool_logging import logged_tool

logger = logging.getLogger(__name__)


def register_formatting_tools(mcp: FastMCP, components) -> None:
    """Register the formatting tools."""

    @mcp.tool()
    @logged_tool(components, "Formatting")
    async def format_document(path: str) -> str:
        """Fix the whitespace formatting of a C# file. Files with syntax errors are not touched.

        Args:
            path: Path to the .cs file
        """
        logger.info(f"format_document called: path='{path}'")
        return await components.formatting.format_document(path)

    @mcp.tool()
    @logged_tool(components, "Formatting")
    async def format_directory(path: str = ".", recursive: bool = False) -> str:
        """Format the C# files of a directory, skipping files excluded by .gitignore.

        Args:
            path: Directory relative to the base directory (default: base)
            recursive: Include subdirectories
        """
        logger.info(f"format_directory called: path='{path}', recursive={recursive}")
        return await components.formatting.format_directory(path, recursive)

    @mcp.tool()
    @logged_tool(components, "Formatting")
    async def validate_formatting(path: str) -> str:
        """Check whether a C# file is formatted, without changing it.

        Args:
            path: Path to the .cs file
        """
        logger.info(f"validate_formatting called: path='{path}'")
        return await components.formatting.validate_formatting(path)
