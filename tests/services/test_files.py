"""Tests for FileService."""

import pytest

from models.files import FileOperation
from paths.authority import PathAuthority
from paths.errors import PathEscapeError
from services.files import FileService
from services.filters import PathFilter
from settings.config import Settings


@pytest.fixture
def files(authority):
    return FileService(authority)


def relative_paths(infos):
    return [info.relative_path for info in infos]


def test_list_files_skips_ignored_entries(make_files):
    project = make_files({
        ".gitignore": "*.log\nbin/\n",
        "Program.cs": "class Program {}\n",
        "app.log": "noise",
        "bin/Debug/app.dll": "binary",
        "sub/Helper.cs": "class Helper {}\n",
        "sub/.gitignore": "!keep.log\n",
        "sub/keep.log": "kept",
    })
    service = FileService(PathAuthority(project, default_patterns=[".git/"]))

    assert relative_paths(service.list_files()) == [
        ".gitignore",
        "Program.cs",
        "sub/.gitignore",
        "sub/Helper.cs",
        "sub/keep.log",
    ]


def test_list_files_prunes_default_ignored_directories(make_files):
    project = make_files({".git/HEAD": "ref", "a.txt": "a"})
    service = FileService(PathAuthority(project, default_patterns=[".git/"]))

    assert relative_paths(service.list_files()) == ["a.txt"]


def test_default_settings_hide_failure_logs(make_files):
    project = make_files({".mcp-logs/failed-tools-2026-01-01.jsonl": "{}\n", "a.txt": "a"})
    defaults = Settings.model_fields["default_ignore_patterns"].default
    service = FileService(PathAuthority(project, default_patterns=defaults))

    assert relative_paths(service.list_files()) == ["a.txt"]
    assert service.check_ignored([".mcp-logs/"]) == {".mcp-logs/": True}


def test_list_files_with_filters(make_files):
    project = make_files({"a.cs": "", "b.json": "{}", "c.txt": "c", "sub/d.cs": ""})
    service = FileService(PathAuthority(project), PathFilter("*.cs,*.json"))

    assert relative_paths(service.list_files()) == ["a.cs", "b.json", "sub/d.cs"]
    assert relative_paths(service.list_files(filter_text="*.cs")) == ["a.cs", "sub/d.cs"]


def test_list_files_of_subdirectory_and_single_file(make_files, files):
    make_files({"a.txt": "a", "sub/b.txt": "b\nc\n"})

    assert relative_paths(files.list_files("sub")) == ["sub/b.txt"]
    info = files.list_files("sub/b.txt")[0]
    assert info.name == "b.txt"
    assert info.extension == ".txt"
    assert info.size == 4
    assert info.line_count == 2


def test_list_files_missing_path(files):
    with pytest.raises(FileNotFoundError, match="Path not found"):
        files.list_files("missing")


def test_list_files_rejects_escape(files):
    with pytest.raises(PathEscapeError):
        files.list_files("..")


def test_read_and_write_file(files, project):
    written = files.write_file("new/dir/file.txt", "hello\nworld")

    assert written == len("hello\nworld")
    assert (project / "new" / "dir" / "file.txt").exists()
    assert files.read_file("new/dir/file.txt") == "hello\nworld"


def test_write_file_rejects_escape(files, tmp_path):
    with pytest.raises(PathEscapeError):
        files.write_file("../escaped.txt", "x")
    assert not (tmp_path / "escaped.txt").exists()


def test_read_missing_file(files):
    with pytest.raises(FileNotFoundError):
        files.read_file("nope.txt")


def test_delete_files(make_files, files, project):
    make_files({"a.txt": "a", "dir/b.txt": "b"})

    deleted = files.delete_files(["a.txt", "dir", "missing.txt"])

    assert deleted == ["a.txt", "dir"]
    assert not (project / "a.txt").exists()
    assert not (project / "dir").exists()


def test_delete_refuses_base_directory(files, project):
    with pytest.raises(PermissionError):
        files.delete_files(["."])
    assert project.exists()


def test_search_files_is_case_insensitive(make_files, files):
    make_files({
        ".gitignore": "ignored.txt\n",
        "a.txt": "Hello World",
        "b.txt": "goodbye",
        "ignored.txt": "hello",
        "sub/c.cs": "// HELLO",
    })

    assert files.search_files("hello") == ["a.txt", "sub/c.cs"]
    assert files.search_files("hello", filter_text="*.cs") == ["sub/c.cs"]


def test_search_files_skips_binary_content(project, files):
    (project / "blob.bin").write_bytes(b"\xff\xfehello")

    assert files.search_files("hello") == []


def test_copy_files(make_files, files, project):
    make_files({"a.txt": "a", "dir/b.txt": "b"})

    files.copy_files([
        FileOperation(source="a.txt", destination="copies/a.txt"),
        FileOperation(source="dir", destination="dir2"),
    ])

    assert (project / "copies" / "a.txt").read_text() == "a"
    assert (project / "dir2" / "b.txt").read_text() == "b"
    assert (project / "a.txt").exists()


def test_move_files(make_files, files, project):
    make_files({"a.txt": "a"})

    files.move_files([FileOperation(source="a.txt", destination="moved/a.txt")])

    assert not (project / "a.txt").exists()
    assert (project / "moved" / "a.txt").read_text() == "a"


def test_copy_missing_source(files):
    with pytest.raises(FileNotFoundError, match="Source not found"):
        files.copy_files([FileOperation(source="nope.txt", destination="x.txt")])


def test_move_rejects_escaping_destination(make_files, files, project):
    make_files({"a.txt": "a"})

    with pytest.raises(PathEscapeError):
        files.move_files([FileOperation(source="a.txt", destination="../a.txt")])
    assert (project / "a.txt").exists()


def test_check_ignored(make_files):
    project = make_files({".gitignore": "*.log\n"})
    service = FileService(PathAuthority(project))

    assert service.check_ignored(["a.log", "a.txt"]) == {"a.log": True, "a.txt": False}
