"""Record failed tool calls as JSON lines for later inspection.

Each failure is appended to `<log_directory>/failed-tools-YYYY-MM-DD.jsonl`.
Tools opt in with the `logged_tool` decorator, which reaches the logger
through the components object handed to it at registration time.
"""
import functools
import json
import logging
import threading
import traceback
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

MAX_PARAMETER_LENGTH = 200
TRUNCATION_SUFFIX = "... [truncated]"


def sanitize_parameter(value):
    """Shorten long strings so log lines stay small."""
    if isinstance(value, str) and len(value) > MAX_PARAMETER_LENGTH:
        return value[:MAX_PARAMETER_LENGTH] + TRUNCATION_SUFFIX
    if isinstance(value, list):
        return [sanitize_parameter(item) for item in value]
    if hasattr(value, "model_dump"):
        return sanitize_parameter(value.model_dump())
    if isinstance(value, dict):
        return {key: sanitize_parameter(item) for key, item in value.items()}
    return value


class ToolCallLogger:
    """Appends failed tool calls to a daily JSONL file."""

    def __init__(self, log_directory: str | Path):
        self._log_directory = Path(log_directory)
        self._lock = threading.Lock()

    @property
    def log_directory(self) -> Path:
        return self._log_directory

    def log_failed_tool_call(
        self,
        tool_name: str,
        method_name: str,
        request: dict | None,
        exception: BaseException,
    ) -> Path | None:
        """Write one failure record.

        Returns:
            The log file written to, or None if it could not be written
        """
        now = datetime.now(timezone.utc)
        cause = exception.__cause__ or exception.__context__
        entry = {
            "timestamp": now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z",
            "tool_name": tool_name,
            "method_name": method_name,
            "request": sanitize_parameter(request) if request else None,
            "exception": {
                "type": f"{type(exception).__module__}.{type(exception).__qualname__}",
                "message": str(exception),
                "stack_trace": "".join(traceback.format_exception(exception)),
                "inner_exception": str(cause) if cause else None,
            },
        }

        log_file = self._log_directory / f"failed-tools-{now:%Y-%m-%d}.jsonl"
        try:
            self._log_directory.mkdir(parents=True, exist_ok=True)
            with self._lock, open(log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")
        except OSError as e:
            logger.warning(f"Could not write failed tool call to {log_file}: {e}")
            return None

        logger.debug(f"Recorded failed call {tool_name}.{method_name} in {log_file}")
        return log_file


def logged_tool(components, tool_name: str):
    """Decorate an async tool so failures are recorded before being re-raised.

    The request is recorded from the keyword arguments the tool is called
    with, which carry the parameter names declared by the tool signature.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                tool_logger = getattr(components, "tool_logger", None)
                logger.error(f"Tool {func.__name__} failed: {e}")
                if tool_logger is not None:
                    request = {f"param{i}": arg for i, arg in enumerate(args)}
                    request.update(kwargs)
                    tool_logger.log_failed_tool_call(tool_name, func.__name__, request or None, e)
                raise
        return wrapper
    return decorator
