"""
Runs batches of model-requested tool calls.

Each request goes through:
1. Registry lookup
2. Argument parsing (``arguments_json`` -> dict)
3. Input schema validation
4. Execution (sync or async)
5. Output schema validation, when the tool declares one

A failure at any step produces ``ToolResult(success=False)`` for that request
only; the rest of the batch still runs.
"""

from __future__ import annotations

import inspect
import json
import logging
import time
from typing import Any, Iterable

from orbit.errors import ToolError, ToolExecutionError, ToolValidationError
from orbit.llm.types import ToolCallRequest
from orbit.tools.registry import ToolRegistry
from orbit.tools.validation import ToolValidator
from orbit.types import ErrorCode, ToolResult

logger = logging.getLogger(__name__)


class ToolExecutor:
    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    async def execute_all(self, requests: Iterable[ToolCallRequest]) -> list[ToolResult]:
        """Execute *requests* sequentially; results keep the request order."""
        results: list[ToolResult] = []
        for request in requests:
            results.append(await self.execute(request))
        return results

    async def execute(self, request: ToolCallRequest) -> ToolResult:
        start = time.monotonic()
        try:
            value = await self._run(request)
        except ToolError as e:
            result = ToolResult(
                tool_call_id=request.id,
                tool_name=request.name,
                success=False,
                error=e.message,
                error_code=e.code,
            )
        else:
            result = ToolResult(
                tool_call_id=request.id,
                tool_name=request.name,
                success=True,
                result=value,
            )

        duration_ms = int((time.monotonic() - start) * 1000)
        if result.success:
            logger.info(
                "tool=%s id=%s ok duration_ms=%d", request.name, request.id, duration_ms
            )
        else:
            logger.warning(
                "tool=%s id=%s failed code=%s error=%s",
                request.name,
                request.id,
                result.error_code,
                result.error,
            )
        return result

    async def _run(self, request: ToolCallRequest) -> Any:
        tool = self.registry.require(request.name)
        arguments = self._parse_arguments(request)

        try:
            checked = ToolValidator.validate(tool, arguments)
        except Exception as e:
            raise ToolValidationError(tool.name, [f"invalid schema: {e}"]) from e
        if not checked:
            raise ToolValidationError(tool.name, checked.errors)

        try:
            value = tool.execute(**checked.data)
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            raise ToolExecutionError(tool.name, e) from e

        out = ToolValidator.validate_output(tool, value)
        if not out:
            raise ToolValidationError(
                tool.name, out.errors, code=ErrorCode.INVALID_OUTPUT, prefix="Invalid output"
            )
        return value

    @staticmethod
    def _parse_arguments(request: ToolCallRequest) -> dict:
        raw = (request.arguments_json or "").strip() or "{}"
        try:
            args = json.loads(raw)
        except (json.JSONDecodeError, ValueError) as e:
            raise ToolValidationError(
                request.name,
                [f"arguments are not valid JSON ({e})"],
                code=ErrorCode.INVALID_ARGUMENTS,
            ) from e
        if not isinstance(args, dict):
            raise ToolValidationError(
                request.name,
                ["arguments must be a JSON object"],
                code=ErrorCode.INVALID_ARGUMENTS,
            )
        return args
