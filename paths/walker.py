"""Upward search for ignore files, bounded by the base directory."""
import logging
import os
from collections.abc import Callable
from pathlib import Path

from paths.errors import PathOutsideBaseError
from paths.rules import RuleSet, load_rule_set

logger = logging.getLogger(__name__)


def normalize_path(path: str | os.PathLike) -> Path:
    """Absolute path with '.' and '..' collapsed, without touching the disk."""
    return Path(os.path.abspath(path))


def is_within(path: Path, base_directory: Path) -> bool:
    """True if path is base_directory or lies below it (both normalized)."""
    return path == base_directory or base_directory in path.parents


def collect_rule_sets(
    target_directory: str | os.PathLike,
    base_directory: str | os.PathLike,
    load: Callable[[Path], RuleSet | None] = load_rule_set,
) -> list[RuleSet]:
    """Collect the rule sets that apply inside target_directory.

    Visits target_directory and each parent up to and including
    base_directory, never above it. Directories without an ignore file
    contribute nothing.

    Args:
        target_directory: Directory to start from
        base_directory: Upper bound of the walk
        load: Loads the rule set of one directory (None if it has none)

    Returns:
        Rule sets ordered root to leaf, so deeper directories are evaluated last

    Raises:
        PathOutsideBaseError: target_directory is not inside base_directory
    """
    target = normalize_path(target_directory)
    base = normalize_path(base_directory)
    if not is_within(target, base):
        raise PathOutsideBaseError(target, base)

    stack = [target]
    while stack[-1] != base:
        stack.append(stack[-1].parent)

    rule_sets = []
    while stack:
        rule_set = load(stack.pop())
        if rule_set is not None:
            rule_sets.append(rule_set)

    logger.debug(f"Collected {len(rule_sets)} rule sets for {target}")
    return rule_sets
