"""Whitespace formatting of C# files through `dotnet format`.

Files are syntax-checked with tree-sitter first. A file that does not
parse is reported and left untouched.
"""
import asyncio
import logging
from pathlib import Path

from services.csharp import CSharpService
from services.dotnet import DotNetRunner
from services.files import FileService

logger = logging.getLogger(__name__)

# `dotnet format --verify-no-changes` exit code when files would change
VERIFY_FAILED_EXIT_CODE = 2


class FormattingService:
    def __init__(self, files: FileService, csharp: CSharpService, dotnet: DotNetRunner):
        self._files = files
        self._authority = files.authority
        self._csharp = csharp
        self._dotnet = dotnet

    async def format_document(self, path: str) -> str:
        self._require_csharp_file(path)
        errors = await asyncio.to_thread(self._csharp.check_syntax, path)
        if errors:
            return "Error: Cannot format document due to syntax errors:\n" + "\n".join(errors)

        result = await self._dotnet.format_whitespace([path])
        if not result.success:
            return f"Formatting failed for {path} (exit code {result.exit_code}):\n{_details(result)}"
        logger.info(f"Formatted {path}")
        return f"Successfully formatted: {path}"

    async def format_directory(self, path: str = ".", recursive: bool = False) -> str:
        """Format the non-ignored .cs files of a directory and summarize per file."""
        root = self._authority.resolve(path)
        if not root.is_dir():
            raise FileNotFoundError(f"Directory not found: {path}")

        found = await asyncio.to_thread(lambda: list(self._files.iter_files(path, "*.cs")))
        files = [self._authority.relative_path(f) for f in found if recursive or f.parent == root]
        if not files:
            return f"No C# files found in directory: {path}"

        failures = {}
        for file in files:
            errors = await asyncio.to_thread(self._csharp.check_syntax, file)
            if errors:
                failures[file] = f"syntax errors ({errors[0]})"

        clean = [file for file in files if file not in failures]
        if clean:
            result = await self._dotnet.format_whitespace(clean)
            if not result.success:
                failures.update((file, f"dotnet format exited with {result.exit_code}") for file in clean)

        formatted = len(files) - len(failures)
        logger.info(f"Formatted {formatted} of {len(files)} files under {path}")
        lines = [
            f"Formatting complete for directory: {path}",
            f"Files processed: {len(files)}",
            f"Successfully formatted: {formatted}",
            f"Errors: {len(failures)}",
            "",
            "Detailed results:",
        ]
        lines += [f"✗ {file}: {failures[file]}" if file in failures else f"✓ {file}" for file in files]
        return "\n".join(lines)

    async def validate_formatting(self, path: str) -> str:
        """Report whether formatting would change a file, without changing it."""
        self._require_csharp_file(path)
        errors = await asyncio.to_thread(self._csharp.check_syntax, path)
        if errors:
            return "Validation failed - Syntax errors found:\n" + "\n".join(errors)

        result = await self._dotnet.format_whitespace([path], verify=True)
        if result.success:
            return f"✓ Document is properly formatted: {path}"

        differences = {(d.file, d.line) for d in result.parsed_errors if d.error_code == "WHITESPACE"}
        if differences or result.exit_code == VERIFY_FAILED_EXIT_CODE:
            return (
                f"✗ Document formatting issues found: {path}\n"
                f"Lines with formatting differences: {len(differences)}\n"
                "Run format_document to fix formatting issues."
            )
        return f"Error validating formatting for {path} (exit code {result.exit_code}):\n{_details(result)}"

    def _require_csharp_file(self, path: str) -> Path:
        full_path = self._authority.resolve(path)
        if not full_path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        if full_path.suffix.lower() != ".cs":
            raise ValueError(f"Not a C# file: {path}")
        return full_path


def _details(result) -> str:
    return (result.errors or result.output).strip()
