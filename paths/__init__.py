"""Path confinement and gitignore-style ignore matching."""
from paths.authority import PathAuthority
from paths.errors import PathAuthorityError, PathEscapeError, PathOutsideBaseError
from paths.matcher import is_ignored
from paths.patterns import CompiledPattern, compile_pattern
from paths.rules import RuleSet, load_rule_set
from paths.walker import collect_rule_sets

__all__ = [
    "PathAuthority",
    "PathAuthorityError",
    "PathEscapeError",
    "PathOutsideBaseError",
    "CompiledPattern",
    "compile_pattern",
    "RuleSet",
    "load_rule_set",
    "collect_rule_sets",
    "is_ignored",
]
