"""C# tools: inspect types and edit their members in place."""
import asyncio
import logging
from mcp.server.fastmcp import FastMCP

from models.code import without_method_names
from services.tool_logging import logged_tool

logger = logging.getLogger(__name__)


def register_csharp_tools(mcp: FastMCP, components) -> None:
    """Register the C# structure tools."""

    @mcp.tool()
    @logged_tool(components, "CSharp")
    async def analyze_file(path: str) -> list[dict]:
        """Describe every type declared in a C# file: kind, modifiers, bases and members.

        Method names are left blank; use read_member to fetch a method by name.

        Args:
            path: Path to the .cs file, relative to the base directory

        Returns:
            One entry per class, interface, struct, enum or record, nested types included
        """
        logger.info(f"analyze_file called: path='{path}'")
        types = await asyncio.to_thread(components.csharp.analyze_file, path)
        logger.info(f"Returning {len(types)} types")
        return [without_method_names(t).to_dict() for t in types]

    @mcp.tool()
    @logged_tool(components, "CSharp")
    async def read_member(path: str, type_name: str, member_type: str, member_name: str) -> str:
        """Read one member of a type.

        Args:
            path: Path to the .cs file
            type_name: Name of the class, interface, struct or record
            member_type: "method", "property" or "field"
            member_name: Name of the member

        Returns:
            The method body, or a JSON description of the property or field
        """
        logger.info(f"read_member called: path='{path}', {type_name}.{member_name} ({member_type})")
        return await asyncio.to_thread(
            components.csharp.read_member, path, type_name, member_type, member_name
        )

    @mcp.tool()
    @logged_tool(components, "CSharp")
    async def add_member(path: str, type_name: str, member_type: str, member_name: str, member_code: str) -> str:
        """Add a method, property or field at the end of a type.

        Args:
            path: Path to the .cs file
            type_name: Type receiving the member
            member_type: "method", "property" or "field"
            member_name: Name the new member declares
            member_code: Complete C# declaration of the member
        """
        logger.info(f"add_member called: path='{path}', {type_name}.{member_name} ({member_type})")
        return await asyncio.to_thread(
            components.csharp.add_member, path, type_name, member_type, member_name, member_code
        )

    @mcp.tool()
    @logged_tool(components, "CSharp")
    async def remove_member(path: str, type_name: str, member_type: str, member_name: str) -> str:
        """Remove a method, property or field from a type, with its /// documentation.

        Args:
            path: Path to the .cs file
            type_name: Type declaring the member
            member_type: "method", "property" or "field"
            member_name: Name of the member to remove
        """
        logger.info(f"remove_member called: path='{path}', {type_name}.{member_name} ({member_type})")
        return await asyncio.to_thread(
            components.csharp.remove_member, path, type_name, member_type, member_name
        )

    @mcp.tool()
    @logged_tool(components, "CSharp")
    async def replace_member(
        path: str,
        type_name: str,
        member_type: str,
        member_name: str,
        new_member_name: str,
        new_member_code: str,
    ) -> str:
        """Replace the declaration of a method, property or field.

        Args:
            path: Path to the .cs file
            type_name: Type declaring the member
            member_type: "method", "property" or "field"
            member_name: Name of the member to replace
            new_member_name: Name the replacement declares (may equal member_name)
            new_member_code: Complete C# declaration replacing the old one
        """
        logger.info(f"replace_member called: path='{path}', {type_name}.{member_name} -> {new_member_name}")
        return await asyncio.to_thread(
            components.csharp.replace_member,
            path, type_name, member_type, member_name, new_member_name, new_member_code,
        )

    @mcp.tool()
    @logged_tool(components, "CSharp")
    async def create_type(path: str, type_name: str, type_kind: str, type_code: str) -> str:
        """Add a new type to a C# file, creating the file if it does not exist.

        Args:
            path: Path to the .cs file
            type_name: Name the new type declares
            type_kind: "class", "interface", "struct", "enum" or "record"
            type_code: Complete C# declaration of the type
        """
        logger.info(f"create_type called: path='{path}', {type_kind} {type_name}")
        return await asyncio.to_thread(components.csharp.create_type, path, type_name, type_kind, type_code)
