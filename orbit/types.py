import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ToolResult:
    tool_call_id: str
    tool_name: str
    success: bool
    result: Any = None
    error: str | None = None
    error_code: str | None = None

    def to_content(self) -> str:
        """Render the body of the ``tool`` message sent back to the model."""
        if not self.success:
            return json.dumps({"error": self.error or "Unknown error"})
        if isinstance(self.result, str):
            return self.result
        return json.dumps(self.result, default=str)


class ErrorCode:
    CONFIGURATION_ERROR = "configuration_error"
    TRANSPORT_ERROR = "transport_error"
    TIMEOUT = "timeout"
    LLM_PROTOCOL_ERROR = "llm_protocol_error"
    MAX_ITERATIONS = "max_iterations"
    UNKNOWN_TOOL = "unknown_tool"
    INVALID_ARGUMENTS = "invalid_arguments"
    VALIDATION_ERROR = "validation_error"
    TOOL_EXCEPTION = "tool_exception"
    INVALID_OUTPUT = "invalid_output"
