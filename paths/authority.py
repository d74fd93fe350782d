"""Path authority: confines paths to a base directory and answers ignore queries.

Every file operation resolves its paths here before touching the disk.
Ignore queries walk the directory hierarchy between the path and the base
directory, merge the ignore files found there root to leaf, and evaluate
the result with git's "last match wins" rules.

Rule sets are cached per directory for the lifetime of the authority and
are never invalidated: edits to ignore files during a session are not seen.

Confinement is lexical. Paths are normalized with os.path.abspath and
symlinks are never resolved, so a symlink inside the base directory that
points outside it is followed by file operations. Do not point the server
at a tree containing such links if that matters.
"""
import logging
import os
import threading
from collections.abc import Iterable
from pathlib import Path

from paths.errors import PathEscapeError
from paths.matcher import find_last_match
from paths.rules import IGNORE_FILE_NAME, RuleSet, load_rule_set
from paths.walker import collect_rule_sets, is_within, normalize_path

logger = logging.getLogger(__name__)

_SEPARATORS = tuple({"/", os.sep})


class PathAuthority:
    """Owns the base directory and the per-directory rule set cache."""

    def __init__(
        self,
        base_directory: str | os.PathLike,
        *,
        default_patterns: Iterable[str] = (),
        ignore_file_name: str = IGNORE_FILE_NAME,
    ):
        """
        Args:
            base_directory: Root that no resolved path or ignore lookup may leave
            default_patterns: Ignore rules applied below every ignore file
                found on disk, as if declared in the base directory
            ignore_file_name: Name of the per-directory ignore file
        """
        self._base = normalize_path(base_directory)
        self._ignore_file_name = ignore_file_name
        self._defaults = RuleSet.from_lines(default_patterns, self._base)
        self._rule_sets: dict[Path, RuleSet | None] = {}
        self._lock = threading.Lock()
        logger.info(
            f"Path authority rooted at {self._base} "
            f"({len(self._defaults.patterns)} default patterns, ignore file '{ignore_file_name}')"
        )

    @property
    def base_directory(self) -> Path:
        return self._base

    def resolve(self, path: str | os.PathLike = "") -> Path:
        """Normalize path (relative to the base, or absolute) and confine it.

        An empty path or '.' is the base directory itself.

        Raises:
            PathEscapeError: the normalized path lies outside the base directory
        """
        return self._confine(self._base, path)

    def relative_path(self, path: str | os.PathLike) -> str:
        """POSIX-style path relative to the base directory ('.' for the base)."""
        return self.resolve(path).relative_to(self._base).as_posix()

    def should_ignore(self, path: str | os.PathLike, context: str | os.PathLike | None = None) -> bool:
        """Check whether path is excluded by the ignore files above it.

        A trailing separator marks path as a directory; the filesystem is not
        consulted. A path inside an ignored directory is ignored as well.

        Args:
            path: Path relative to context (or absolute)
            context: Directory that relative paths start from, defaults to the base

        Raises:
            PathEscapeError: path or context lies outside the base directory
        """
        raw = os.fspath(path)
        is_directory = raw.endswith(_SEPARATORS)
        origin = self._base if context is None else self.resolve(context)
        candidate = self._confine(origin, raw)
        if candidate == self._base:
            return False

        ancestor = self._base
        for name in candidate.relative_to(self._base).parts[:-1]:
            ancestor = ancestor / name
            if self._is_excluded(ancestor, True):
                logger.debug(f"Ignoring {raw}: parent directory {ancestor} is ignored")
                return True

        return self._is_excluded(candidate, is_directory)

    def filter_ignored(self, paths: Iterable[str]) -> list[str]:
        """Drop the paths that should be ignored, keeping order."""
        return [path for path in paths if not self.should_ignore(path)]

    def rule_sets_for(self, directory: str | os.PathLike) -> list[RuleSet]:
        """Rule sets applying inside directory, default patterns first."""
        return self._collect(self.resolve(directory))

    def _confine(self, origin: Path, path: str | os.PathLike) -> Path:
        raw = os.fspath(path)
        if not raw or raw == ".":
            full = origin
        else:
            full = normalize_path(origin / raw)
        if not is_within(full, self._base):
            logger.warning(f"Rejected path outside base directory: {raw}")
            raise PathEscapeError(raw, self._base)
        return full

    def _is_excluded(self, candidate: Path, is_directory: bool) -> bool:
        match = find_last_match(candidate, is_directory, self._collect(candidate.parent))
        if match is None:
            return False

        rule_set, pattern = match
        if pattern.negated:
            logger.debug(f"Keeping {candidate}: re-included by '{pattern}' in {rule_set.source or 'defaults'}")
            return False
        logger.debug(f"Ignoring {candidate}: matches '{pattern}' in {rule_set.source or 'defaults'}")
        return True

    def _collect(self, directory: Path) -> list[RuleSet]:
        rule_sets = collect_rule_sets(directory, self._base, load=self._load_cached)
        if self._defaults.patterns:
            rule_sets.insert(0, self._defaults)
        return rule_sets

    def _load_cached(self, directory: Path) -> RuleSet | None:
        try:
            return self._rule_sets[directory]
        except KeyError:
            pass

        rule_set = load_rule_set(directory, self._ignore_file_name)
        with self._lock:
            return self._rule_sets.setdefault(directory, rule_set)
