"""Context tools: ranged reads, search with context, directory overview."""
import asyncio
import logging
from mcp.server.fastmcp import FastMCP

from services.tool_logging import logged_tool

logger = logging.getLogger(__name__)


def register_context_tools(mcp: FastMCP, components) -> None:
    """Register the context tools."""

    @mcp.tool()
    @logged_tool(components, "Context")
    async def read_file_lines(path: str, start_line: int, end_line: int) -> str:
        """Read a range of lines from a file instead of the whole file.

        Args:
            path: File path relative to the base directory
            start_line: First line (1-based)
            end_line: Last line (1-based, inclusive)
        """
        logger.info(f"read_file_lines called: path='{path}', lines {start_line}-{end_line}")
        return await asyncio.to_thread(components.context.read_file_lines, path, start_line, end_line)

    @mcp.tool()
    @logged_tool(components, "Context")
    async def read_around_line(path: str, center_line: int, context_lines: int = 5) -> str:
        """Read the lines surrounding a line number, e.g. one reported by a build error.

        Args:
            path: File path relative to the base directory
            center_line: Line to center on (1-based)
            context_lines: Lines to include before and after
        """
        logger.info(f"read_around_line called: path='{path}', line {center_line} +/- {context_lines}")
        return await asyncio.to_thread(components.context.read_around_line, path, center_line, context_lines)

    @mcp.tool()
    @logged_tool(components, "Context")
    async def search_files_with_context(
        text: str,
        path: str = "",
        context_lines: int = 3,
        file_pattern: str = "*",
        max_results: int = 20,
    ) -> str:
        """Search file contents and show each match with surrounding lines.

        Args:
            text: Text to search for (case-insensitive)
            path: Directory to search in (default: base directory)
            context_lines: Lines to include before and after each match
            file_pattern: Glob filter for files (e.g. "*.cs")
            max_results: Maximum number of matches to return
        """
        logger.info(f"search_files_with_context called: text='{text}', path='{path}', pattern='{file_pattern}'")
        return await asyncio.to_thread(
            components.context.search_with_context, text, path, context_lines, file_pattern, max_results
        )

    @mcp.tool()
    @logged_tool(components, "Context")
    async def file_tree_summary(
        path: str = "",
        max_depth: int = 3,
        file_types: str = "",
        include_hidden: bool = False,
        include_details: bool = True,
        sort_by: str = "name",
    ) -> str:
        """Generate a directory overview that respects .gitignore files.

        Args:
            path: Directory to summarize (default: base directory)
            max_depth: Maximum directory depth to descend
            file_types: Extensions to include, comma separated (e.g. "cs,json,md")
            include_hidden: Include entries whose name starts with "."
            include_details: Include sizes and line counts
            sort_by: File order within a directory: name, size, modified, extension
        """
        logger.info(f"file_tree_summary called: path='{path}', max_depth={max_depth}, file_types='{file_types}'")
        return await asyncio.to_thread(
            components.context.file_tree_summary,
            path, max_depth, file_types, include_hidden, include_details, sort_by,
        )
