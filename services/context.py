"""Targeted reads, contextual search and directory overviews."""
import logging
from dataclasses import dataclass, field
from pathlib import Path

from models.files import DirectoryInfo, FileInfo
from services.files import FileService

logger = logging.getLogger(__name__)

SORT_KEYS = {
    "name": lambda f: f.name.lower(),
    "size": lambda f: -f.size,
    "modified": lambda f: f.last_modified,
    "extension": lambda f: (f.extension, f.name.lower()),
}


@dataclass
class SearchMatch:
    file_path: str
    line_number: int
    line: str
    context_before: list[str] = field(default_factory=list)
    context_after: list[str] = field(default_factory=list)


class ContextService:
    """Read parts of files and summarize directories without dumping everything."""

    def __init__(self, files: FileService):
        self._files = files
        self._authority = files.authority

    def read_file_lines(self, path: str, start_line: int, end_line: int) -> str:
        """Read lines start_line..end_line (1-based, inclusive) with a header line."""
        if not path:
            raise ValueError("Path cannot be empty")
        if start_line < 1:
            raise ValueError("Start line must be >= 1")
        if end_line < start_line:
            raise ValueError("End line must be >= start line")

        full_path = self._authority.resolve(path)
        if not full_path.is_file():
            raise FileNotFoundError(f"File not found: {path}")

        lines = full_path.read_text(encoding="utf-8").splitlines()
        if start_line > len(lines):
            return f"// File only has {len(lines)} lines, cannot read from line {start_line}"

        last = min(end_line, len(lines))
        header = f"// Lines {start_line}-{last} of {len(lines)} total lines from {path}"
        return "\n".join([header, *lines[start_line - 1:last]])

    def read_around_line(self, path: str, center_line: int, context_lines: int = 5) -> str:
        start = max(1, center_line - context_lines)
        return self.read_file_lines(path, start, center_line + context_lines)

    def search_with_context(
        self,
        text: str,
        path: str = "",
        context_lines: int = 3,
        file_pattern: str = "*",
        max_results: int = 20,
    ) -> str:
        """Search non-ignored files for text and show surrounding lines."""
        if not text:
            raise ValueError("Search text cannot be empty")

        needle = text.casefold()
        results: list[SearchMatch] = []
        for file in self._files.iter_files(path or ".", file_pattern):
            try:
                lines = file.read_text(encoding="utf-8").splitlines()
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"Skipping unreadable file {file}: {e}")
                continue

            relative = self._authority.relative_path(file)
            for index, line in enumerate(lines):
                if needle not in line.casefold():
                    continue
                first = max(0, index - context_lines)
                last = min(len(lines) - 1, index + context_lines)
                results.append(SearchMatch(
                    file_path=relative,
                    line_number=index + 1,
                    line=line.strip(),
                    context_before=[f"{n + 1:04d}: {lines[n]}" for n in range(first, index)],
                    context_after=[f"{n + 1:04d}: {lines[n]}" for n in range(index + 1, last + 1)],
                ))
                if len(results) >= max_results:
                    return _format_matches(results, text)

        return _format_matches(results, text)

    def file_tree_summary(
        self,
        path: str = "",
        max_depth: int = 3,
        file_types: str = "",
        include_hidden: bool = False,
        include_details: bool = True,
        sort_by: str = "name",
    ) -> str:
        """Render an ignore-aware directory tree with file counts and sizes."""
        root = self._authority.resolve(path)
        if not root.exists():
            raise FileNotFoundError(f"Directory not found: {path or '.'}")
        if not root.is_dir():
            raise NotADirectoryError(f"Not a directory: {path}")
        if sort_by not in SORT_KEYS:
            raise ValueError(f"sort_by must be one of {', '.join(SORT_KEYS)}")

        extensions = parse_file_types(file_types)
        tree = self._analyze(root, 0, max_depth, extensions, include_hidden, include_details)

        lines = [f"Directory Tree Summary: {tree.name}", "=" * 50]
        if include_details:
            lines += [f"Total Files: {tree.total_files}", f"Total Size: {format_file_size(tree.total_size)}", ""]
        _render(tree, lines, "", include_details, sort_by)
        return "\n".join(lines)

    def _analyze(
        self,
        directory: Path,
        depth: int,
        max_depth: int,
        extensions: set[str],
        include_hidden: bool,
        include_details: bool,
    ) -> DirectoryInfo:
        relative = self._authority.relative_path(directory)
        node = DirectoryInfo(name=directory.name or str(directory), relative_path=relative)

        try:
            entries = sorted(directory.iterdir())
        except PermissionError as e:
            logger.warning(f"Cannot read directory {relative}: {e}")
            return node

        for entry in entries:
            if not include_hidden and entry.name.startswith("."):
                continue
            entry_relative = self._authority.relative_path(entry)

            if entry.is_dir() and not entry.is_symlink():
                if depth >= max_depth or self._authority.should_ignore(entry_relative + "/"):
                    continue
                child = self._analyze(entry, depth + 1, max_depth, extensions, include_hidden, include_details)
                node.subdirectories.append(child)
                node.total_files += child.total_files
                node.total_size += child.total_size
            elif entry.is_file():
                if extensions and entry.suffix.lower() not in extensions:
                    continue
                if self._authority.should_ignore(entry_relative):
                    continue
                info = FileInfo.from_path(entry, entry_relative, count_lines=include_details)
                node.files.append(info)
                node.total_files += 1
                node.total_size += info.size

        return node


def parse_file_types(file_types: str) -> set[str]:
    """'cs,json;.md' -> {'.cs', '.json', '.md'}"""
    extensions = set()
    for ext in file_types.replace(";", ",").split(","):
        ext = ext.strip().lower()
        if ext:
            extensions.add(ext if ext.startswith(".") else f".{ext}")
    return extensions


def format_file_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024


def _render(node: DirectoryInfo, lines: list[str], indent: str, include_details: bool, sort_by: str) -> None:
    for file in sorted(node.files, key=SORT_KEYS[sort_by]):
        details = ""
        if include_details:
            details = f" ({format_file_size(file.size)}"
            if file.line_count:
                details += f", {file.line_count} lines"
            details += ")"
        lines.append(f"{indent}{file.name}{details}")

    for child in sorted(node.subdirectories, key=lambda d: d.name.lower()):
        details = f" ({child.total_files} files, {format_file_size(child.total_size)})" if include_details else ""
        lines.append(f"{indent}{child.name}/{details}")
        if child.files or child.subdirectories:
            _render(child, lines, indent + "  ", include_details, sort_by)


def _format_matches(results: list[SearchMatch], text: str) -> str:
    if not results:
        return f"No matches found for '{text}'"

    lines = [f"Found {len(results)} matches for '{text}':", ""]
    for result in results:
        lines.append(f"{result.file_path}:{result.line_number}")
        lines += [f"  {line}" for line in result.context_before]
        lines.append(f"> {result.line_number:04d}: {result.line}")
        lines += [f"  {line}" for line in result.context_after]
        lines.append("")
    return "\n".join(lines)
