"""Shared pytest fixtures."""

import pytest

from paths.authority import PathAuthority


@pytest.fixture
def project(tmp_path):
    """
    Base directory containing an empty 'sub' directory.

    It sits one level below tmp_path so tests can put ignore files above it.
    """
    base = tmp_path / "project"
    (base / "sub").mkdir(parents=True)
    return base


@pytest.fixture
def authority(project):
    return PathAuthority(project)


@pytest.fixture
def make_files(project):
    """Create files under the project from a {relative_path: content} mapping."""

    def _make(files: dict[str, str]):
        for relative, content in files.items():
            path = project / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return project

    return _make
