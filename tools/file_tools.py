"""File tools: list, read, write, delete, search, copy and move."""
import asyncio
import logging
from mcp.server.fastmcp import FastMCP

from models.files import FileOperation
from services.tool_logging import logged_tool

logger = logging.getLogger(__name__)


def register_file_tools(mcp: FastMCP, components) -> None:
    """Register the file tools."""

    @mcp.tool()
    @logged_tool(components, "File")
    async def list_files(path: str = ".", filter: str | None = None) -> list[dict]:
        """List files under a directory, skipping anything excluded by .gitignore files.

        Args:
            path: Directory to list, relative to the base directory (default: base)
            filter: Glob filter, comma separated (e.g. "*.cs" or "*.js,*.ts")

        Returns:
            File details: name, relative path, size, last modified, extension, line count
        """
        logger.info(f"list_files called: path='{path}', filter={filter!r}")
        files = await asyncio.to_thread(components.files.list_files, path, filter)
        logger.info(f"Returning {len(files)} files")
        return [f.to_dict() for f in files]

    @mcp.tool()
    @logged_tool(components, "File")
    async def read_file(path: str) -> str:
        """Read the complete contents of a text file.

        Args:
            path: File path relative to the base directory
        """
        logger.info(f"read_file called: path='{path}'")
        return await asyncio.to_thread(components.files.read_file, path)

    @mcp.tool()
    @logged_tool(components, "File")
    async def write_file(path: str, content: str) -> str:
        """Create or overwrite a file with the given content. Parent directories are created.

        Args:
            path: File path relative to the base directory
            content: Text content to write
        """
        logger.info(f"write_file called: path='{path}', {len(content)} characters")
        written = await asyncio.to_thread(components.files.write_file, path, content)
        return f"Wrote {written} characters to {path}"

    @mcp.tool()
    @logged_tool(components, "File")
    async def delete_file(paths: list[str]) -> list[str]:
        """Permanently delete files or directories (directories recursively).

        Args:
            paths: Paths to delete, relative to the base directory

        Returns:
            The paths that existed and were deleted
        """
        logger.info(f"delete_file called: {len(paths)} paths")
        return await asyncio.to_thread(components.files.delete_files, paths)

    @mcp.tool()
    @logged_tool(components, "File")
    async def search_files(text: str, path: str = ".", filter: str | None = None) -> list[str]:
        """Find files whose content contains the given text (case-insensitive).

        Args:
            text: Text to search for
            path: Directory to search in (default: base directory)
            filter: Glob filter limiting which files are searched (e.g. "*.cs,*.md")

        Returns:
            Relative paths of matching files
        """
        logger.info(f"search_files called: text='{text}', path='{path}', filter={filter!r}")
        matches = await asyncio.to_thread(components.files.search_files, text, path, filter)
        logger.info(f"Found {len(matches)} matching files")
        return matches

    @mcp.tool()
    @logged_tool(components, "File")
    async def copy_file(operations: list[FileOperation]) -> str:
        """Copy files or directories using source/destination pairs.

        Args:
            operations: Source and destination paths, relative to the base directory
        """
        logger.info(f"copy_file called: {len(operations)} operations")
        await asyncio.to_thread(components.files.copy_files, operations)
        return f"Copied {len(operations)} item(s)"

    @mcp.tool()
    @logged_tool(components, "File")
    async def move_file(operations: list[FileOperation]) -> str:
        """Move or rename files and directories using source/destination pairs.

        Args:
            operations: Source and destination paths, relative to the base directory
        """
        logger.info(f"move_file called: {len(operations)} operations")
        await asyncio.to_thread(components.files.move_files, operations)
        return f"Moved {len(operations)} item(s)"

    @mcp.tool()
    @logged_tool(components, "File")
    async def check_ignored(paths: list[str]) -> dict[str, bool]:
        """Check which paths are excluded by .gitignore rules.

        A trailing "/" marks a path as a directory (e.g. "bin/").

        Args:
            paths: Paths relative to the base directory
        """
        logger.info(f"check_ignored called: {len(paths)} paths")
        return await asyncio.to_thread(components.files.check_ignored, paths)
