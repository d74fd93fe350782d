"""Build and test results, and their JSON rendering for tool responses."""
import json
from dataclasses import dataclass, field


@dataclass
class BuildError:
    """One MSBuild diagnostic line."""
    file: str
    line: int
    column: int
    error_code: str
    message: str
    severity: str  # "error" or "warning"


@dataclass
class BuildResult:
    """Outcome of a dotnet command."""
    success: bool
    output: str = ""
    errors: str = ""
    exit_code: int = 0
    duration: float = 0.0  # seconds
    parsed_errors: list[BuildError] = field(default_factory=list)


@dataclass
class FailedTest:
    test_name: str
    class_name: str
    error_message: str = ""
    stack_trace: str = ""


@dataclass
class TestResult(BuildResult):
    """Outcome of `dotnet test`."""
    __test__ = False  # not a pytest test class

    tests_passed: int = 0
    tests_failed: int = 0
    tests_skipped: int = 0
    total_tests: int = 0
    failed_tests: list[FailedTest] = field(default_factory=list)


def _without_empty(data: dict) -> dict:
    return {key: value for key, value in data.items() if value not in (None, "", [])}


def format_build_result(result: BuildResult) -> str:
    """Render a build result as indented JSON.

    Successful builds report only the outcome; failures carry the raw
    output and the parsed diagnostics, omitting empty fields.
    """
    if result.success:
        return json.dumps({"success": True, "exit_code": result.exit_code, "error_count": 0}, indent=2)

    return json.dumps(_without_empty({
        "success": False,
        "exit_code": result.exit_code,
        "error_count": len(result.parsed_errors),
        "output": result.output,
        "errors": result.errors,
        "parsed_errors": [
            {
                "severity": e.severity,
                "error_code": e.error_code,
                "message": e.message,
                "file": e.file,
                "line": e.line,
                "column": e.column,
            }
            for e in result.parsed_errors
        ],
    }), indent=2)


def format_test_result(result: TestResult) -> str:
    """Render a test result as indented JSON."""
    counts = {
        "exit_code": result.exit_code,
        "total_tests": result.total_tests,
        "passed": result.tests_passed,
        "failed": result.tests_failed,
        "skipped": result.tests_skipped,
    }
    if result.success:
        return json.dumps({"success": True, **counts}, indent=2)

    return json.dumps(_without_empty({
        "success": False,
        **counts,
        "output": result.output,
        "errors": result.errors,
        "failed_tests": [
            _without_empty({
                "test_name": t.test_name,
                "class_name": t.class_name,
                "error_message": t.error_message,
                "stack_trace": t.stack_trace,
            })
            for t in result.failed_tests
        ],
    }), indent=2)
