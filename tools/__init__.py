"""MCP tools for file, context, build, C# structure and formatting operations."""
from tools.file_tools import register_file_tools
from tools.context_tools import register_context_tools
from tools.build_tools import register_build_tools
from tools.csharp_tools import register_csharp_tools
from tools.formatting_tools import register_formatting_tools

__all__ = [
    "register_file_tools",
    "register_context_tools",
    "register_build_tools",
    "register_csharp_tools",
    "register_formatting_tools",
]
