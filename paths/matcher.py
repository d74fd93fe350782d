"""Decide whether a path is ignored by an ordered list of rule sets.

Patterns are evaluated root rule set first, each set in file order. Every
matching pattern overwrites the verdict (ignored unless negated), so the
last match wins. No pattern matching means not ignored. Pure: no I/O.
"""
from collections.abc import Callable, Sequence
from functools import lru_cache
from pathlib import PurePath

from paths.patterns import CompiledPattern, Segment, SegmentKind
from paths.rules import RuleSet


def _segment_matcher(segments: Sequence[Segment], parts: Sequence[str]) -> Callable[[int, int], bool]:
    """Build match(i, j): do segments[i:] match parts[j:] entirely?

    Results are memoized per (i, j), so patterns with several '**' stay
    polynomial in the path length instead of exponential.
    """
    segments = tuple(segments)
    parts = tuple(parts)

    @lru_cache(maxsize=None)
    def match(i: int, j: int) -> bool:
        if i == len(segments):
            return j == len(parts)

        head = segments[i]
        if head.kind is SegmentKind.RECURSIVE:
            if i + 1 == len(segments):
                # 'dir/**' matches what is inside dir, not dir itself
                return j < len(parts)
            # greedy first, then give segments back
            return any(match(i + 1, skip) for skip in range(len(parts), j - 1, -1))

        if j == len(parts):
            return False
        return head.matches(parts[j]) and match(i + 1, j + 1)

    return match


def match_segments(segments: Sequence[Segment], parts: Sequence[str]) -> bool:
    """Match pattern segments against path segments, all of them.

    '**' first tries to consume as many path segments as possible and
    backtracks when the remaining pattern fails.
    """
    return _segment_matcher(segments, parts)(0, 0)


def pattern_matches(pattern: CompiledPattern, parts: Sequence[str], is_directory: bool) -> bool:
    """Match one pattern against a path split into segments.

    parts must be relative to the pattern's declaring directory. Unanchored
    patterns match any trailing run of segments, as if prefixed with '**/'.
    """
    if pattern.directory_only and not is_directory:
        return False
    if not pattern.segments or not parts:
        return False
    match = _segment_matcher(pattern.segments, parts)
    if pattern.anchored:
        return match(0, 0)
    return any(match(0, start) for start in range(len(parts)))


def find_last_match(
    candidate: PurePath,
    is_directory: bool,
    rule_sets: Sequence[RuleSet],
) -> tuple[RuleSet, CompiledPattern] | None:
    """Return the last pattern matching candidate and the rule set declaring it.

    Args:
        candidate: Absolute path being tested
        is_directory: Whether candidate names a directory
        rule_sets: Rule sets ordered root to leaf

    Rule sets whose declaring directory does not contain candidate are skipped.
    """
    candidate = PurePath(candidate)
    last = None
    for rule_set in rule_sets:
        try:
            parts = candidate.relative_to(rule_set.declaring_directory).parts
        except ValueError:
            continue
        for pattern in rule_set.patterns:
            if pattern_matches(pattern, parts, is_directory):
                last = (rule_set, pattern)
    return last


def is_ignored(candidate: PurePath, is_directory: bool, rule_sets: Sequence[RuleSet]) -> bool:
    """Final verdict: True if the last matching pattern is not a negation."""
    match = find_last_match(candidate, is_directory, rule_sets)
    return match is not None and not match[1].negated
