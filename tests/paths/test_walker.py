"""Tests for collecting rule sets between a directory and the base."""

import pytest

from paths.errors import PathOutsideBaseError
from paths.walker import collect_rule_sets, is_within, normalize_path


def test_normalize_collapses_dot_segments(tmp_path):
    assert normalize_path(tmp_path / "a" / ".." / "b" / ".") == tmp_path / "b"


def test_is_within(tmp_path):
    assert is_within(tmp_path, tmp_path)
    assert is_within(tmp_path / "a" / "b", tmp_path)
    assert not is_within(tmp_path.parent, tmp_path)
    assert not is_within(tmp_path.parent / (tmp_path.name + "-sibling"), tmp_path)


def test_no_ignore_files_gives_empty_list(make_files):
    project = make_files({"sub/deep/file.txt": "x"})

    assert collect_rule_sets(project / "sub" / "deep", project) == []


def test_rule_sets_ordered_root_to_leaf(make_files):
    project = make_files({
        ".gitignore": "*.log\n",
        "sub/.gitignore": "!keep.log\n",
        "sub/deep/.gitignore": "*.tmp\n",
    })

    rule_sets = collect_rule_sets(project / "sub" / "deep", project)

    assert [r.declaring_directory for r in rule_sets] == [
        project,
        project / "sub",
        project / "sub" / "deep",
    ]
    assert [p.raw for p in rule_sets[1].patterns] == ["!keep.log"]


def test_directories_without_ignore_file_are_skipped(make_files):
    project = make_files({
        ".gitignore": "*.log\n",
        "sub/deep/.gitignore": "*.tmp\n",
    })

    rule_sets = collect_rule_sets(project / "sub" / "deep", project)

    assert [r.declaring_directory for r in rule_sets] == [project, project / "sub" / "deep"]


def test_walk_stops_at_base(make_files):
    project = make_files({"sub/file.txt": "x"})
    (project.parent / ".gitignore").write_text("*\n")

    assert collect_rule_sets(project / "sub", project) == []


def test_target_outside_base_raises(tmp_path, project):
    with pytest.raises(PathOutsideBaseError):
        collect_rule_sets(tmp_path, project)


def test_custom_loader_sees_every_directory(project):
    visited = []

    def load(directory):
        visited.append(directory)
        return None

    collect_rule_sets(project / "sub", project, load=load)

    assert sorted(visited) == sorted([project, project / "sub"])
