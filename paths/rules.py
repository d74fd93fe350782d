"""Rule sets: the compiled patterns of one directory's ignore file."""
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from paths.patterns import CompiledPattern, compile_pattern

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".gitignore"


@dataclass(frozen=True)
class RuleSet:
    """Ordered patterns declared in one directory.

    Order is significant: later patterns override earlier ones.
    """
    declaring_directory: Path
    patterns: tuple[CompiledPattern, ...] = ()
    source: Path | None = None

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        declaring_directory: Path,
        source: Path | None = None,
    ) -> "RuleSet":
        """Compile lines in order, dropping blanks and comments."""
        patterns = []
        for line in lines:
            pattern = compile_pattern(line, declaring_directory)
            if pattern is not None:
                patterns.append(pattern)
        return cls(declaring_directory, tuple(patterns), source)


def load_rule_set(directory: Path, file_name: str = IGNORE_FILE_NAME) -> RuleSet | None:
    """Load the ignore file in directory.

    Returns None when the directory has no ignore file. An ignore file that
    cannot be read contributes an empty rule set rather than an error.
    """
    ignore_file = directory / file_name
    try:
        if not ignore_file.is_file():
            return None
        content = ignore_file.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to read ignore file {ignore_file}: {e}")
        return RuleSet(directory, (), ignore_file)

    rule_set = RuleSet.from_lines(content.splitlines(), directory, source=ignore_file)
    logger.debug(f"Loaded {len(rule_set.patterns)} patterns from {ignore_file}")
    return rule_set
