"""Tests for ToolRegistry, FunctionTool and the built-in tools."""

import pytest

from orbit.errors import ToolNotFoundError
from orbit.tools.base import FunctionTool, normalize_schema
from orbit.tools.builtin import (
    CalculatorTool,
    SearchTool,
    WeatherTool,
    builtin_tools,
    evaluate_arithmetic,
)
from orbit.tools.registry import ToolRegistry
from orbit.types import ErrorCode
from tests.mock_tools import CountingTool, EchoTool, FailingTool


class TestToolRegistry:
    """Test suite for ToolRegistry."""

    def test_register_and_get(self):
        reg = ToolRegistry()
        tool = EchoTool()
        reg.register(tool)
        assert reg.get("echo") is tool
        assert "echo" in reg
        assert len(reg) == 1

    def test_get_returns_none_for_unknown(self):
        assert ToolRegistry().get("nonexistent") is None

    def test_require_raises_for_unknown(self):
        with pytest.raises(ToolNotFoundError) as exc_info:
            ToolRegistry().require("weather_v2")
        assert exc_info.value.message == "Tool 'weather_v2' not found"
        assert exc_info.value.code == ErrorCode.UNKNOWN_TOOL

    def test_duplicate_registration_raises_valueerror(self):
        reg = ToolRegistry()
        reg.register(EchoTool())
        with pytest.raises(ValueError, match="already registered"):
            reg.register(EchoTool())

    def test_duplicate_registration_with_overwrite(self):
        reg = ToolRegistry()
        reg.register(EchoTool())
        replacement = EchoTool()
        reg.register(replacement, overwrite=True)
        assert reg.get("echo") is replacement

    def test_unregister(self):
        reg = ToolRegistry([EchoTool()])
        assert reg.unregister("echo") is True
        assert reg.unregister("echo") is False
        assert len(reg) == 0

    def test_list_sorted_by_name(self):
        reg = ToolRegistry([FailingTool(), EchoTool(), CountingTool()])
        assert reg.names() == ["counter", "echo", "explode"]

    def test_openai_schema(self):
        reg = ToolRegistry([EchoTool()])
        schema = reg.to_openai_schema()
        assert schema == [{
            "type": "function",
            "function": {
                "name": "echo",
                "description": "Echoes the input message back.",
                "parameters": EchoTool().parameters,
            },
        }]

    def test_empty_registry_schema(self):
        assert ToolRegistry().to_openai_schema() == []


class TestFunctionTool:
    def test_wraps_callable(self):
        tool = FunctionTool("add", "Add two numbers", {"properties": {}}, lambda a, b: a + b)
        assert tool.execute(a=1, b=2) == 3
        assert tool.strict is False
        assert tool.output_schema is None

    def test_schema_normalized(self):
        tool = FunctionTool("noop", "Nothing", {}, lambda: None)
        assert tool.to_openai_schema()["function"]["parameters"] == {
            "type": "object",
            "properties": {},
        }

    def test_normalize_does_not_mutate(self):
        original = {"required": ["x"]}
        normalize_schema(original)
        assert original == {"required": ["x"]}


class TestBuiltinTools:
    @pytest.mark.parametrize(
        "expression,expected",
        [
            ("2 + 2", 4),
            ("6*7", 42),
            ("(1 + 2) * 3", 9),
            ("10 / 4", 2.5),
            ("-3 + 1", -2),
            ("1.5 * 2", 3.0),
        ],
    )
    def test_evaluate_arithmetic(self, expression, expected):
        assert evaluate_arithmetic(expression) == expected

    @pytest.mark.parametrize(
        "expression",
        ["__import__('os')", "2 ** 8", "x + 1", "1 +", "True + 1", "'a' * 3"],
    )
    def test_rejects_non_arithmetic(self, expression):
        with pytest.raises(ValueError):
            evaluate_arithmetic(expression)

    async def test_calculator_returns_integral_int(self):
        result = await CalculatorTool().execute(expression="6*7")
        assert result == {"result": 42, "expression": "6*7"}
        assert isinstance(result["result"], int)

    async def test_weather_is_canned(self):
        result = await WeatherTool().execute(city="Paris")
        assert result == {"city": "Paris", "temperature": 72, "condition": "sunny", "humidity": 45}

    async def test_search_is_canned(self):
        tool = SearchTool()
        result = await tool.execute(query="kyoto gardens")
        assert result["results"] == [
            {
                "title": "Example Result",
                "url": "https://example.com",
                "snippet": "This is a mock search result.",
            }
        ]
        assert tool.parameters["required"] == ["query"]

    def test_builtin_tool_names(self):
        assert sorted(t.name for t in builtin_tools()) == ["calculator", "search", "weather"]
