from typing import Any

from orbit.tools.base import Tool, normalize_schema
from orbit.validation import ValidationResult, validate


class ToolValidator:
    @staticmethod
    def validate(tool: Tool, arguments: Any) -> ValidationResult:
        return validate(normalize_schema(tool.parameters), arguments, strict=tool.strict)

    @staticmethod
    def validate_output(tool: Tool, result: Any) -> ValidationResult:
        if tool.output_schema is None:
            return ValidationResult(True, data=result)
        return validate(tool.output_schema, result)
