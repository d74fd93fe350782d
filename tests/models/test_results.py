"""Tests for result rendering."""

import json

from models.files import FileInfo, count_file_lines
from models.results import (
    BuildError,
    BuildResult,
    FailedTest,
    TestResult,
    format_build_result,
    format_test_result,
)


def test_successful_build_is_terse():
    result = BuildResult(success=True, output="lots of output", exit_code=0)

    assert json.loads(format_build_result(result)) == {"success": True, "exit_code": 0, "error_count": 0}


def test_failed_build_includes_diagnostics():
    result = BuildResult(
        success=False,
        output="Build FAILED.",
        exit_code=1,
        parsed_errors=[BuildError("src/A.cs", 3, 7, "CS0103", "The name 'x' does not exist", "error")],
    )

    data = json.loads(format_build_result(result))

    assert data["success"] is False
    assert data["exit_code"] == 1
    assert data["error_count"] == 1
    assert data["output"] == "Build FAILED."
    assert "errors" not in data
    assert data["parsed_errors"] == [{
        "severity": "error",
        "error_code": "CS0103",
        "message": "The name 'x' does not exist",
        "file": "src/A.cs",
        "line": 3,
        "column": 7,
    }]


def test_failed_build_without_diagnostics_omits_list():
    data = json.loads(format_build_result(BuildResult(success=False, errors="dotnet not found", exit_code=-1)))

    assert data == {"success": False, "exit_code": -1, "error_count": 0, "errors": "dotnet not found"}


def test_successful_tests_report_counts():
    result = TestResult(success=True, output="...", tests_passed=5, tests_skipped=1, total_tests=6)

    assert json.loads(format_test_result(result)) == {
        "success": True,
        "exit_code": 0,
        "total_tests": 6,
        "passed": 5,
        "failed": 0,
        "skipped": 1,
    }


def test_failed_tests_are_listed():
    result = TestResult(
        success=False,
        exit_code=1,
        output="Failed!",
        tests_passed=1,
        tests_failed=1,
        total_tests=2,
        failed_tests=[FailedTest("Ns.Tests.Adds", "Ns.Tests", error_message="Assert failed")],
    )

    data = json.loads(format_test_result(result))

    assert data["failed"] == 1
    assert data["output"] == "Failed!"
    assert data["failed_tests"] == [
        {"test_name": "Ns.Tests.Adds", "class_name": "Ns.Tests", "error_message": "Assert failed"},
    ]


def test_count_file_lines(tmp_path):
    cases = {"empty.txt": b"", "one.txt": b"one", "two.txt": b"one\ntwo\n", "crlf.txt": b"a\r\nb"}
    for name, data in cases.items():
        (tmp_path / name).write_bytes(data)

    assert {name: count_file_lines(tmp_path / name) for name in cases} == {
        "empty.txt": 0,
        "one.txt": 1,
        "two.txt": 2,
        "crlf.txt": 2,
    }


def test_file_info_from_path(tmp_path):
    path = tmp_path / "Program.CS"
    path.write_text("a\nb\n")

    info = FileInfo.from_path(path, "src/Program.CS")

    assert info.to_dict() | {"last_modified": None} == {
        "name": "Program.CS",
        "relative_path": "src/Program.CS",
        "size": 4,
        "last_modified": None,
        "extension": ".cs",
        "line_count": 2,
    }
    assert info.last_modified.endswith("+00:00")
