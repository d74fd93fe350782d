"""Run dotnet build/test commands and parse their console output."""
import asyncio
import logging
import re
import subprocess
import time

from models.results import BuildError, BuildResult, FailedTest, TestResult
from paths.authority import PathAuthority

logger = logging.getLogger(__name__)

# src/Program.cs(12,5): error CS1002: ; expected [/repo/App.csproj]
DIAGNOSTIC_PATTERN = re.compile(r"^\s*(.+?)\((\d+),(\d+)\):\s*(error|warning)\s*([A-Z0-9]+):\s*(.+)$")
# Failed!  - Failed:     1, Passed:     4, Skipped:     0, Total:     5
SUMMARY_COUNT_PATTERN = re.compile(r"\b(Passed|Failed|Skipped):\s*(\d+)")
# Failed MyApp.Tests.CalculatorTests.Adds [12 ms]
FAILED_TEST_PATTERN = re.compile(r"^\s*Failed\s+(.+?)\s+\[[^\]]*\]\s*(.*)$")
TEST_BOUNDARY_PATTERN = re.compile(r"^\s*(Passed|Skipped|Failed)[\s!]")


def parse_build_diagnostics(*streams: str) -> list[BuildError]:
    """Extract MSBuild errors and warnings from command output."""
    diagnostics = []
    for stream in streams:
        for line in stream.splitlines():
            match = DIAGNOSTIC_PATTERN.match(line)
            if match:
                diagnostics.append(BuildError(
                    file=match.group(1),
                    line=int(match.group(2)),
                    column=int(match.group(3)),
                    severity=match.group(4),
                    error_code=match.group(5),
                    message=match.group(6).strip(),
                ))
    return diagnostics


def parse_test_output(result: TestResult) -> None:
    """Fill test counts and failed test details from `dotnet test` output."""
    current: FailedTest | None = None
    section = None
    message_lines: list[str] = []
    stack_lines: list[str] = []

    def finish():
        if current is not None:
            current.error_message = "\n".join(filter(None, [current.error_message, *message_lines]))
            current.stack_trace = "\n".join(stack_lines)

    for line in result.output.splitlines():
        counts = dict(SUMMARY_COUNT_PATTERN.findall(line))
        if {"Passed", "Failed", "Skipped"} <= counts.keys():
            result.tests_passed += int(counts["Passed"])
            result.tests_failed += int(counts["Failed"])
            result.tests_skipped += int(counts["Skipped"])
            continue

        match = FAILED_TEST_PATTERN.match(line)
        if match:
            finish()
            name = match.group(1).strip()
            current = FailedTest(test_name=name, class_name=_class_name(name), error_message=match.group(2).strip())
            result.failed_tests.append(current)
            section, message_lines, stack_lines = None, [], []
            continue

        if current is None:
            continue
        stripped = line.strip()
        if stripped == "Error Message:":
            section = "message"
        elif stripped == "Stack Trace:":
            section = "stack"
        elif not stripped or TEST_BOUNDARY_PATTERN.match(line) or stripped.endswith("Messages:"):
            finish()
            current, section = None, None
        elif section == "message":
            message_lines.append(stripped)
        elif section == "stack":
            stack_lines.append(stripped)
    finish()

    result.total_tests = result.tests_passed + result.tests_failed + result.tests_skipped


def _class_name(test_name: str) -> str:
    method = test_name.split("(", 1)[0]
    return method.rsplit(".", 1)[0] if "." in method else test_name


class DotNetRunner:
    """Runs the dotnet CLI inside the base directory."""

    def __init__(self, authority: PathAuthority, dotnet_path: str = "dotnet"):
        self._authority = authority
        self._dotnet_path = dotnet_path

    async def build_project(self, path: str) -> BuildResult:
        return await self._build_command("build", path)

    async def build_solution(self, path: str) -> BuildResult:
        return await self._build_command("build", path)

    async def clean_project(self, path: str) -> BuildResult:
        return await self._build_command("clean", path)

    async def clean_solution(self, path: str) -> BuildResult:
        return await self._build_command("clean", path)

    async def restore_packages(self, path: str) -> BuildResult:
        full_path = self._authority.resolve(path)
        return await self._execute(["restore", str(full_path), "--verbosity", "normal"], BuildResult)

    async def publish_project(self, path: str, output_path: str | None = None) -> BuildResult:
        arguments = ["publish", str(self._authority.resolve(path))]
        if output_path:
            arguments += ["--output", str(self._authority.resolve(output_path))]
        return await self._execute(arguments, BuildResult)

    async def run_tests(self, path: str, test_filter: str | None = None) -> TestResult:
        full_path = self._authority.resolve(path)
        arguments = ["test", str(full_path), "--verbosity", "normal", "--logger", "console", "--no-restore"]
        if test_filter:
            arguments += ["--filter", test_filter]

        result = await self._execute(arguments, TestResult)
        parse_test_output(result)
        logger.info(
            f"Tests finished: {result.tests_passed} passed, {result.tests_failed} failed, "
            f"{result.tests_skipped} skipped"
        )
        return result

    async def format_whitespace(self, paths: list[str], verify: bool = False) -> BuildResult:
        """Run `dotnet format whitespace` over files, treating the base as a plain folder.

        With verify, nothing is written and each difference is reported as a
        WHITESPACE diagnostic.
        """
        relative = [self._authority.relative_path(path) for path in paths]
        arguments = ["format", "whitespace", str(self._authority.base_directory), "--folder", "--include", *relative]
        if verify:
            arguments.append("--verify-no-changes")
        return await self._execute(arguments, BuildResult)

    async def _build_command(self, verb: str, path: str) -> BuildResult:
        full_path = self._authority.resolve(path)
        return await self._execute([verb, str(full_path), "--verbosity", "normal", "--no-restore"], BuildResult)

    async def _execute(self, arguments: list[str], result_type: type[BuildResult]) -> BuildResult:
        command = [self._dotnet_path, *arguments]
        logger.info(f"Running: {' '.join(command)}")
        started = time.perf_counter()

        try:
            completed = await asyncio.to_thread(
                subprocess.run,
                command,
                cwd=self._authority.base_directory,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            logger.error(f"Could not run {self._dotnet_path}: {e}")
            return result_type(success=False, errors=str(e), exit_code=-1, duration=time.perf_counter() - started)

        result = result_type(
            success=completed.returncode == 0,
            output=completed.stdout or "",
            errors=completed.stderr or "",
            exit_code=completed.returncode,
            duration=time.perf_counter() - started,
        )
        result.parsed_errors = parse_build_diagnostics(result.errors, result.output)
        logger.info(f"{arguments[0]} exited with {result.exit_code} in {result.duration:.1f}s")
        return result
