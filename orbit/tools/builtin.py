"""Built-in tools shipped with the agent."""

from __future__ import annotations

import ast
import operator

from orbit.tools.base import Tool

_BIN_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}
_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def evaluate_arithmetic(expression: str) -> float:
    """Evaluate ``+ - * /`` arithmetic over numbers and parentheses."""
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as e:
        raise ValueError(f"Invalid expression: {expression!r}") from e
    return _eval_node(tree.body, expression)


def _eval_node(node: ast.AST, expression: str) -> float:
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BIN_OPS:
        left = _eval_node(node.left, expression)
        right = _eval_node(node.right, expression)
        return _BIN_OPS[type(node.op)](left, right)
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand, expression))
    raise ValueError(f"Unsupported expression: {expression!r}")


class CalculatorTool(Tool):
    @property
    def name(self) -> str:
        return "calculator"

    @property
    def description(self) -> str:
        return "Perform basic arithmetic calculations"

    @property
    def parameters(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "expression": {
                    "type": "string",
                    "description": 'A mathematical expression like "2 + 2" or "10 * 5"',
                },
            },
            "required": ["expression"],
        }

    @property
    def output_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "result": {"type": "number"},
                "expression": {"type": "string"},
            },
            "required": ["result", "expression"],
        }

    async def execute(self, **kwargs) -> dict:
        expression = kwargs["expression"]
        value = evaluate_arithmetic(expression)
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return {"result": value, "expression": expression}


class WeatherTool(Tool):
    """Canned weather lookup for demos; no network access."""

    @property
    def name(self) -> str:
        return "weather"

    @property
    def description(self) -> str:
        return "Get the current weather for a city"

    @property
    def parameters(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "city": {"type": "string", "description": "The city to get weather for"},
            },
            "required": ["city"],
        }

    @property
    def output_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "city": {"type": "string"},
                "temperature": {"type": "number"},
                "condition": {"type": "string"},
                "humidity": {"type": "number"},
            },
            "required": ["temperature", "condition", "humidity"],
        }

    async def execute(self, **kwargs) -> dict:
        return {
            "city": kwargs["city"],
            "temperature": 72,
            "condition": "sunny",
            "humidity": 45,
        }


class SearchTool(Tool):
    """Canned web search for demos; always returns one placeholder hit."""

    @property
    def name(self) -> str:
        return "search"

    @property
    def description(self) -> str:
        return "Search for information on the web"

    @property
    def parameters(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "The search query"},
            },
            "required": ["query"],
        }

    @property
    def output_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "results": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "title": {"type": "string"},
                            "url": {"type": "string"},
                            "snippet": {"type": "string"},
                        },
                        "required": ["title", "url", "snippet"],
                    },
                },
            },
            "required": ["results"],
        }

    async def execute(self, **kwargs) -> dict:
        return {
            "results": [
                {
                    "title": "Example Result",
                    "url": "https://example.com",
                    "snippet": "This is a mock search result.",
                }
            ]
        }


def builtin_tools() -> list[Tool]:
    return [CalculatorTool(), WeatherTool(), SearchTool()]
