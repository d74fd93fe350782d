"""Data models returned by the tools."""
from models.files import DirectoryInfo, FileInfo, FileOperation
from models.results import BuildError, BuildResult, FailedTest, TestResult, format_build_result, format_test_result

__all__ = [
    "DirectoryInfo",
    "FileInfo",
    "FileOperation",
    "BuildError",
    "BuildResult",
    "FailedTest",
    "TestResult",
    "format_build_result",
    "format_test_result",
]
