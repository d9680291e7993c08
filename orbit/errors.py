"""Failure taxonomy for the agent core.

Transport, timeout, protocol and iteration failures propagate to the caller of
``Agent.send``.  Tool failures are raised inside the executor and converted
into ``ToolResult(success=False)``; they never escape ``execute_all``.
"""

from __future__ import annotations

from orbit.types import ErrorCode


class OrbitError(Exception):
    """Structured error from the agent core."""

    def __init__(self, message: str, code: str = ""):
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigurationError(OrbitError):
    """Invalid construction or runtime options."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__(
            "Invalid configuration: " + "; ".join(self.errors),
            code=ErrorCode.CONFIGURATION_ERROR,
        )


class TransportError(OrbitError):
    """Non-success response (or network failure) from the remote endpoint."""

    def __init__(self, status: int | None, body: str):
        self.status = status
        self.body = body
        label = f"HTTP {status}" if status is not None else "network error"
        super().__init__(f"{label}: {body[:500]}", code=ErrorCode.TRANSPORT_ERROR)


class RequestTimeoutError(OrbitError, TimeoutError):
    """No response within the configured budget."""

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Request timed out after {timeout_ms}ms", code=ErrorCode.TIMEOUT
        )


class ProtocolError(OrbitError):
    """Response body did not match the expected shape."""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = list(errors or [])
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message, code=ErrorCode.LLM_PROTOCOL_ERROR)


class MaxIterationsExceeded(OrbitError):
    """The tool-calling loop used up its iteration bound."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"Max tool iterations ({limit}) exceeded",
            code=ErrorCode.MAX_ITERATIONS,
        )


class ToolError(OrbitError):
    """Base for failures captured inside ``ToolExecutor.execute_all``."""

    def __init__(self, tool_name: str, message: str, code: str):
        self.tool_name = tool_name
        super().__init__(message, code=code)


class ToolNotFoundError(ToolError):
    def __init__(self, tool_name: str):
        super().__init__(
            tool_name, f"Tool '{tool_name}' not found", ErrorCode.UNKNOWN_TOOL
        )


class ToolValidationError(ToolError):
    def __init__(
        self,
        tool_name: str,
        errors: list[str],
        code: str = ErrorCode.VALIDATION_ERROR,
        prefix: str = "Invalid arguments",
    ):
        self.errors = list(errors)
        super().__init__(tool_name, f"{prefix}: {'; '.join(self.errors)}", code)


class ToolExecutionError(ToolError):
    def __init__(self, tool_name: str, cause: BaseException):
        self.cause = cause
        super().__init__(
            tool_name, str(cause) or type(cause).__name__, ErrorCode.TOOL_EXCEPTION
        )
