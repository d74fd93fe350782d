"""Tests for the match engine."""

import time
from pathlib import Path

from paths.matcher import find_last_match, is_ignored, match_segments, pattern_matches
from paths.patterns import compile_pattern
from paths.rules import RuleSet

BASE = Path("/repo")


def segments(pattern_text):
    return compile_pattern(pattern_text).segments


def test_recursive_segment_spans_zero_or_more_segments():
    pattern = segments("a/**/b")

    assert match_segments(pattern, ("a", "b"))
    assert match_segments(pattern, ("a", "x", "b"))
    assert match_segments(pattern, ("a", "x", "y", "b"))
    assert not match_segments(pattern, ("a", "x", "c"))


def test_recursive_segment_backtracks():
    pattern = segments("**/b/*.txt")

    assert match_segments(pattern, ("b", "b", "c.txt"))
    assert match_segments(pattern, ("x", "b", "c.txt"))
    assert not match_segments(pattern, ("x", "b", "c", "d.txt"))


def test_trailing_recursive_segment_needs_content():
    pattern = segments("logs/**")

    assert match_segments(pattern, ("logs", "today.txt"))
    assert match_segments(pattern, ("logs", "a", "b"))
    assert not match_segments(pattern, ("logs",))


def test_many_recursive_segments_stay_fast():
    pattern = segments("**/a/**/a/**/a/**/a/**/a/**/a/**/b")
    parts = ("a",) * 40
    rule_set = RuleSet.from_lines(["a/**/a/**/a/**/a/**/a/**/a/**/b"], BASE)

    started = time.perf_counter()
    assert not match_segments(pattern, parts)
    assert match_segments(pattern, parts + ("b",))
    assert not is_ignored(BASE.joinpath(*parts), False, [rule_set])
    assert time.perf_counter() - started < 2.0


def test_unanchored_pattern_matches_at_any_depth():
    pattern = compile_pattern("build")

    assert pattern_matches(pattern, ("build",), True)
    assert pattern_matches(pattern, ("src", "app", "build"), True)
    assert not pattern_matches(pattern, ("build", "out.txt"), False)


def test_anchored_pattern_matches_from_declaring_directory():
    pattern = compile_pattern("/build")

    assert pattern_matches(pattern, ("build",), True)
    assert not pattern_matches(pattern, ("sub", "build"), True)


def test_directory_only_pattern_skips_files():
    pattern = compile_pattern("temp/")

    assert pattern_matches(pattern, ("temp",), True)
    assert not pattern_matches(pattern, ("temp",), False)


def test_no_rule_sets_means_not_ignored():
    assert not is_ignored(BASE / "anything.log", False, [])


def test_negation_overrides_earlier_pattern():
    rule_set = RuleSet.from_lines(["*.log", "!keep.log"], BASE)

    assert not is_ignored(BASE / "keep.log", False, [rule_set])
    assert is_ignored(BASE / "other.log", False, [rule_set])


def test_later_pattern_wins_within_a_set():
    rule_set = RuleSet.from_lines(["!keep.log", "*.log"], BASE)

    assert is_ignored(BASE / "keep.log", False, [rule_set])


def test_leaf_rule_set_evaluated_after_root():
    root = RuleSet.from_lines(["!important.log"], BASE)
    leaf = RuleSet.from_lines(["*.log"], BASE / "sub")

    assert is_ignored(BASE / "sub" / "important.log", False, [root, leaf])
    assert not is_ignored(BASE / "sub" / "important.log", False, [leaf, root])


def test_anchored_pattern_is_relative_to_its_own_directory():
    leaf = RuleSet.from_lines(["/generated"], BASE / "sub")

    assert is_ignored(BASE / "sub" / "generated", True, [leaf])
    assert not is_ignored(BASE / "generated", True, [leaf])
    assert not is_ignored(BASE / "sub" / "deeper" / "generated", True, [leaf])


def test_rule_set_outside_candidate_is_skipped():
    other = RuleSet.from_lines(["*"], BASE / "other")

    assert not is_ignored(BASE / "sub" / "file.txt", False, [other])


def test_find_last_match_reports_deciding_pattern():
    root = RuleSet.from_lines(["*.log"], BASE)
    leaf = RuleSet.from_lines(["!debug.log"], BASE / "sub")

    rule_set, pattern = find_last_match(BASE / "sub" / "debug.log", False, [root, leaf])

    assert rule_set is leaf
    assert pattern.raw == "!debug.log"


def test_engine_is_deterministic():
    rule_set = RuleSet.from_lines(["*.tmp", "!a.tmp", "a.tmp"], BASE)

    results = {is_ignored(BASE / "a.tmp", False, [rule_set]) for _ in range(5)}

    assert results == {True}
