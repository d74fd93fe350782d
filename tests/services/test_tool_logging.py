"""Tests for failed tool call logging."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from models.files import FileOperation
from services.tool_logging import (
    MAX_PARAMETER_LENGTH,
    TRUNCATION_SUFFIX,
    ToolCallLogger,
    logged_tool,
    sanitize_parameter,
)


def read_entries(log_file):
    return [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]


def test_sanitize_truncates_long_strings():
    long_text = "x" * (MAX_PARAMETER_LENGTH + 50)

    assert sanitize_parameter(long_text) == "x" * MAX_PARAMETER_LENGTH + TRUNCATION_SUFFIX
    assert sanitize_parameter("short") == "short"
    assert sanitize_parameter(42) == 42


def test_sanitize_recurses_into_containers_and_models():
    long_text = "y" * (MAX_PARAMETER_LENGTH + 1)

    value = sanitize_parameter({
        "items": [long_text, 1],
        "operation": FileOperation(source=long_text, destination="b"),
    })

    assert value["items"][0].endswith(TRUNCATION_SUFFIX)
    assert value["items"][1] == 1
    assert value["operation"]["source"].endswith(TRUNCATION_SUFFIX)
    assert value["operation"]["destination"] == "b"


def test_log_failed_tool_call_writes_jsonl(tmp_path):
    tool_logger = ToolCallLogger(tmp_path / "logs")
    try:
        raise ValueError("inner")
    except ValueError as inner:
        try:
            raise RuntimeError("outer") from inner
        except RuntimeError as e:
            error = e

    log_file = tool_logger.log_failed_tool_call("File", "read_file", {"path": "a.txt"}, error)

    assert log_file.parent == tmp_path / "logs"
    assert log_file.name.startswith("failed-tools-")
    assert log_file.suffix == ".jsonl"
    entry = read_entries(log_file)[0]
    assert entry["tool_name"] == "File"
    assert entry["method_name"] == "read_file"
    assert entry["request"] == {"path": "a.txt"}
    assert entry["timestamp"].endswith("Z")
    assert entry["exception"]["type"] == "builtins.RuntimeError"
    assert entry["exception"]["message"] == "outer"
    assert entry["exception"]["inner_exception"] == "inner"
    assert "RuntimeError: outer" in entry["exception"]["stack_trace"]


def test_entries_are_appended(tmp_path):
    tool_logger = ToolCallLogger(tmp_path)

    tool_logger.log_failed_tool_call("Build", "build_project", None, OSError("a"))
    log_file = tool_logger.log_failed_tool_call("Build", "build_project", None, OSError("b"))

    entries = read_entries(log_file)
    assert [e["exception"]["message"] for e in entries] == ["a", "b"]
    assert entries[0]["request"] is None
    assert entries[0]["exception"]["inner_exception"] is None


def test_unwritable_log_directory_returns_none(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    tool_logger = ToolCallLogger(blocker / "logs")

    assert tool_logger.log_failed_tool_call("File", "x", None, ValueError("boom")) is None


def test_logged_tool_records_and_reraises(tmp_path):
    components = SimpleNamespace(tool_logger=ToolCallLogger(tmp_path))

    @logged_tool(components, "File")
    async def read_file(path: str) -> str:
        raise FileNotFoundError(f"File not found: {path}")

    with pytest.raises(FileNotFoundError):
        asyncio.run(read_file(path="missing.txt"))

    (log_file,) = tmp_path.glob("failed-tools-*.jsonl")
    entry = read_entries(log_file)[0]
    assert entry["tool_name"] == "File"
    assert entry["method_name"] == "read_file"
    assert entry["request"] == {"path": "missing.txt"}


def test_logged_tool_names_positional_arguments(tmp_path):
    components = SimpleNamespace(tool_logger=ToolCallLogger(tmp_path))

    @logged_tool(components, "Context")
    async def read_file_lines(path, start_line, end_line):
        raise ValueError("bad range")

    with pytest.raises(ValueError):
        asyncio.run(read_file_lines("a.txt", 5, 1))

    (log_file,) = tmp_path.glob("failed-tools-*.jsonl")
    assert read_entries(log_file)[0]["request"] == {"param0": "a.txt", "param1": 5, "param2": 1}


def test_logged_tool_passes_results_through(tmp_path):
    components = SimpleNamespace(tool_logger=ToolCallLogger(tmp_path))

    @logged_tool(components, "File")
    async def echo(text: str) -> str:
        """Echo text."""
        return text

    assert asyncio.run(echo(text="hi")) == "hi"
    assert echo.__name__ == "echo"
    assert echo.__doc__ == "Echo text."
    assert list(tmp_path.iterdir()) == []


def test_logged_tool_without_logger_still_raises():
    components = SimpleNamespace(tool_logger=None)

    @logged_tool(components, "File")
    async def fail():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        asyncio.run(fail())
