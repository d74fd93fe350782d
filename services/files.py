"""File operations confined to the base directory.

Every path goes through PathAuthority.resolve before the disk is touched,
and listings skip whatever the ignore files exclude.
"""
import logging
import os
import shutil
from collections.abc import Iterator
from pathlib import Path

from models.files import FileInfo, FileOperation
from paths.authority import PathAuthority
from services.filters import PathFilter

logger = logging.getLogger(__name__)


class FileService:
    """List, read, write, search, copy, move and delete files."""

    def __init__(self, authority: PathAuthority, path_filter: PathFilter | None = None):
        self._authority = authority
        self._filter = path_filter or PathFilter()

    @property
    def authority(self) -> PathAuthority:
        return self._authority

    def iter_files(self, path: str = ".", filter_text: str | None = None) -> Iterator[Path]:
        """Yield non-ignored files under path in sorted order.

        Ignored directories are pruned before descending into them.

        Raises:
            FileNotFoundError: path does not exist
        """
        root = self._authority.resolve(path)
        spec = self._filter.compile(filter_text)

        if root.is_file():
            relative = self._authority.relative_path(root)
            if not self._authority.should_ignore(relative) and self._filter.matches(relative, spec):
                yield root
            return
        if not root.is_dir():
            raise FileNotFoundError(f"Path not found: {path}")

        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            dirnames[:] = sorted(
                name for name in dirnames
                if not self._authority.should_ignore(self._authority.relative_path(current / name) + "/")
            )
            for name in sorted(filenames):
                relative = self._authority.relative_path(current / name)
                if self._authority.should_ignore(relative):
                    logger.debug(f"Skipping ignored file {relative}")
                    continue
                if not self._filter.matches(relative, spec):
                    continue
                yield current / name

    def list_files(self, path: str = ".", filter_text: str | None = None) -> list[FileInfo]:
        files = [
            FileInfo.from_path(file, self._authority.relative_path(file))
            for file in self.iter_files(path, filter_text)
        ]
        logger.debug(f"Listed {len(files)} files under {path}")
        return files

    def read_file(self, path: str) -> str:
        return self._authority.resolve(path).read_text(encoding="utf-8")

    def write_file(self, path: str, content: str) -> int:
        """Create or overwrite a file, creating parent directories. Returns characters written."""
        full_path = self._authority.resolve(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        written = full_path.write_text(content, encoding="utf-8")
        logger.info(f"Wrote {written} characters to {path}")
        return written

    def delete_files(self, paths: list[str]) -> list[str]:
        """Delete files and directory trees. Missing paths are skipped.

        Returns:
            The paths that were deleted
        """
        deleted = []
        for path in paths:
            full_path = self._authority.resolve(path)
            if full_path == self._authority.base_directory:
                raise PermissionError("Refusing to delete the base directory")

            if full_path.is_file() or full_path.is_symlink():
                full_path.unlink()
            elif full_path.is_dir():
                shutil.rmtree(full_path)
            else:
                logger.debug(f"Nothing to delete at {path}")
                continue
            deleted.append(path)
            logger.info(f"Deleted {path}")
        return deleted

    def search_files(self, text: str, path: str = ".", filter_text: str | None = None) -> list[str]:
        """Find files whose content contains text, ignoring case."""
        needle = text.casefold()
        matches = []
        for file in self.iter_files(path, filter_text):
            try:
                content = file.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"Skipping unreadable file {file}: {e}")
                continue
            if needle in content.casefold():
                matches.append(self._authority.relative_path(file))
        logger.debug(f"Found '{text}' in {len(matches)} files")
        return matches

    def copy_files(self, operations: list[FileOperation]) -> None:
        for operation in operations:
            source, destination = self._pair(operation)
            if source.is_dir():
                shutil.copytree(source, destination, dirs_exist_ok=True)
            else:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, destination)
            logger.info(f"Copied {operation.source} to {operation.destination}")

    def move_files(self, operations: list[FileOperation]) -> None:
        for operation in operations:
            source, destination = self._pair(operation)
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(source, destination)
            logger.info(f"Moved {operation.source} to {operation.destination}")

    def check_ignored(self, paths: list[str]) -> dict[str, bool]:
        return {path: self._authority.should_ignore(path) for path in paths}

    def _pair(self, operation: FileOperation) -> tuple[Path, Path]:
        source = self._authority.resolve(operation.source)
        destination = self._authority.resolve(operation.destination)
        if not source.exists():
            raise FileNotFoundError(f"Source not found: {operation.source}")
        return source, destination
