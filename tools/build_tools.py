"""Build tools: dotnet build, clean, restore, test and publish."""
import logging
from mcp.server.fastmcp import FastMCP

from models.results import format_build_result, format_test_result
from services.tool_logging import logged_tool

logger = logging.getLogger(__name__)


def register_build_tools(mcp: FastMCP, components) -> None:
    """Register the build tools."""

    @mcp.tool()
    @logged_tool(components, "Build")
    async def build_project(path: str) -> str:
        """Build a C# project and report errors with file, line and column.

        Args:
            path: Path to the .csproj file
        """
        logger.info(f"build_project called: path='{path}'")
        return format_build_result(await components.dotnet.build_project(path))

    @mcp.tool()
    @logged_tool(components, "Build")
    async def build_solution(path: str) -> str:
        """Build a C# solution.

        Args:
            path: Path to the .sln file
        """
        logger.info(f"build_solution called: path='{path}'")
        return format_build_result(await components.dotnet.build_solution(path))

    @mcp.tool()
    @logged_tool(components, "Build")
    async def clean_project(path: str) -> str:
        """Clean a C# project.

        Args:
            path: Path to the .csproj file
        """
        logger.info(f"clean_project called: path='{path}'")
        return format_build_result(await components.dotnet.clean_project(path))

    @mcp.tool()
    @logged_tool(components, "Build")
    async def clean_solution(path: str) -> str:
        """Clean a C# solution.

        Args:
            path: Path to the .sln file
        """
        logger.info(f"clean_solution called: path='{path}'")
        return format_build_result(await components.dotnet.clean_solution(path))

    @mcp.tool()
    @logged_tool(components, "Build")
    async def restore_packages(path: str) -> str:
        """Restore NuGet packages for a project or solution.

        Args:
            path: Path to the .csproj or .sln file
        """
        logger.info(f"restore_packages called: path='{path}'")
        return format_build_result(await components.dotnet.restore_packages(path))

    @mcp.tool()
    @logged_tool(components, "Build")
    async def run_tests(path: str, filter: str | None = None) -> str:
        """Run the tests of a project, optionally filtered.

        Args:
            path: Path to the test .csproj file
            filter: Test filter expression (e.g. "ClassName=MyTests" or "Name~Integration")

        Returns:
            JSON with pass/fail/skip counts and details of failed tests
        """
        logger.info(f"run_tests called: path='{path}', filter={filter!r}")
        return format_test_result(await components.dotnet.run_tests(path, filter))

    @mcp.tool()
    @logged_tool(components, "Build")
    async def publish_project(path: str, output_path: str | None = None) -> str:
        """Publish a C# project.

        Args:
            path: Path to the .csproj file
            output_path: Output directory, relative to the base directory (optional)
        """
        logger.info(f"publish_project called: path='{path}', output_path={output_path!r}")
        return format_build_result(await components.dotnet.publish_project(path, output_path))
