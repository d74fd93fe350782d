"""Glob filters for file listings using pathspec.

Docs: https://github.com/cpburnz/python-pathspec
"""
import logging
import re

import pathspec

logger = logging.getLogger(__name__)


def parse_filter(filter_text: str | None) -> pathspec.GitIgnoreSpec | None:
    """Compile a comma or semicolon separated glob list ('*.cs,*.json').

    Returns None for an empty filter, meaning everything matches.
    """
    if not filter_text:
        return None
    patterns = [p.strip() for p in re.split(r"[,;]", filter_text) if p.strip()]
    if not patterns:
        return None
    return pathspec.GitIgnoreSpec.from_lines(patterns)


class PathFilter:
    """Restricts listings to paths matching a global filter and an optional per-call filter."""

    def __init__(self, global_filter: str | None = None):
        self.global_filter = global_filter
        self._global_spec = parse_filter(global_filter)
        if self._global_spec is not None:
            logger.info(f"Global file filter: {global_filter}")

    def compile(self, filter_text: str | None) -> pathspec.GitIgnoreSpec | None:
        return parse_filter(filter_text)

    def matches(self, relative_path: str, extra: str | pathspec.GitIgnoreSpec | None = None) -> bool:
        """Check a path relative to the base directory against both filters."""
        normalized = relative_path.replace("\\", "/")
        if self._global_spec is not None and not self._global_spec.match_file(normalized):
            return False

        spec = parse_filter(extra) if isinstance(extra, str) else extra
        return spec is None or spec.match_file(normalized)
