"""File and directory descriptions returned by the file tools."""
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field


@dataclass
class FileInfo:
    """A listed file."""
    name: str
    relative_path: str        # POSIX, relative to the base directory
    size: int
    last_modified: str        # ISO 8601, UTC
    extension: str
    line_count: int = 0

    @classmethod
    def from_path(cls, path: Path, relative_path: str, count_lines: bool = True) -> "FileInfo":
        stat = path.stat()
        return cls(
            name=path.name,
            relative_path=relative_path,
            size=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat(),
            extension=path.suffix.lower(),
            line_count=count_file_lines(path) if count_lines else 0,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DirectoryInfo:
    """A directory node of a tree summary."""
    name: str
    relative_path: str
    files: list[FileInfo] = field(default_factory=list)
    subdirectories: list["DirectoryInfo"] = field(default_factory=list)
    total_files: int = 0
    total_size: int = 0


class FileOperation(BaseModel):
    """Source/destination pair for copy and move tools."""
    source: str = Field(description="Path to copy or move from")
    destination: str = Field(description="Path to copy or move to")


def count_file_lines(path: Path) -> int:
    data = path.read_bytes()
    if not data:
        return 0
    return data.count(b"\n") + (0 if data.endswith(b"\n") else 1)
