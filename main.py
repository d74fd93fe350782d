"""MCP Code Editor Server - file, C# and build operations confined to one directory.

Usage:
    uv run main.py --base_directory /path/to/project    # stdio transport
    MCP_CE_BASE_DIRECTORY=/path/to/project mcp run main.py
"""
import sys
import logging
from contextlib import asynccontextmanager
from mcp.server.fastmcp import FastMCP

from settings.config import Settings, get_settings
from paths.authority import PathAuthority
from services.filters import PathFilter
from services.files import FileService
from services.context import ContextService
from services.dotnet import DotNetRunner
from services.csharp import CSharpService
from services.formatting import FormattingService
from services.tool_logging import ToolCallLogger
from tools import (
    register_file_tools,
    register_context_tools,
    register_build_tools,
    register_csharp_tools,
    register_formatting_tools,
)

# Configure logging (stdout carries the MCP transport)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# Initialize settings at module level
settings = get_settings(cli_args=sys.argv[1:] if __name__ == "__main__" else None)
logging.getLogger().setLevel(settings.log_level.upper())


def validate_base_directory(settings: Settings) -> None:
    """Validate that the base directory exists."""
    base_directory = settings.base_path
    if not base_directory.is_dir():
        logger.error(
            f"Base directory not found: {base_directory}\n"
            "Pass --base_directory or set MCP_CE_BASE_DIRECTORY to an existing directory."
        )
        sys.exit(1)


# Component references shared by the tools (initialized in lifespan)
class Components:
    settings = None
    authority = None
    files = None
    context = None
    dotnet = None
    csharp = None
    formatting = None
    tool_logger = None

components = Components()


def init_components(settings: Settings, components: Components) -> Components:
    """Build the service graph for one base directory."""
    components.settings = settings
    components.authority = PathAuthority(
        settings.base_path,
        default_patterns=settings.default_ignore_patterns,
        ignore_file_name=settings.ignore_file_name,
    )
    components.files = FileService(components.authority, PathFilter(settings.global_filter))
    components.context = ContextService(components.files)
    components.dotnet = DotNetRunner(components.authority, settings.dotnet_path)
    components.csharp = CSharpService(components.authority)
    components.formatting = FormattingService(components.files, components.csharp, components.dotnet)
    components.tool_logger = ToolCallLogger(settings.log_path)
    return components


@asynccontextmanager
async def lifespan(server: FastMCP):
    """Manage component lifecycle - runs on server startup/shutdown."""
    validate_base_directory(settings)
    init_components(settings, components)
    logger.info(f"MCP Code Editor server ready! Base directory: {components.authority.base_directory}")

    yield  # Server runs here

    logger.info("Shutting down...")

# Create MCP server
mcp = FastMCP(name="mcp-code-editor", lifespan=lifespan)

# Register tools
register_file_tools(mcp, components)
register_context_tools(mcp, components)
register_build_tools(mcp, components)
register_csharp_tools(mcp, components)
register_formatting_tools(mcp, components)

if __name__ == "__main__":
    mcp.run()
