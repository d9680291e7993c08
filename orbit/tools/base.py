from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable


def normalize_schema(schema: dict | None) -> dict:
    s = dict(schema or {})
    s.setdefault("type", "object")
    s.setdefault("properties", {})
    return s


class Tool(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @property
    @abstractmethod
    def parameters(self) -> dict: ...

    @property
    def output_schema(self) -> dict | None:
        return None

    @property
    def strict(self) -> bool:
        """Reject arguments the input schema does not declare."""
        return False

    @abstractmethod
    def execute(self, **kwargs) -> Any:
        """Run the tool.  May be a coroutine function."""
        ...

    def to_openai_schema(self) -> dict:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": normalize_schema(self.parameters),
            },
        }


class FunctionTool(Tool):
    """Wraps a plain (sync or async) callable as a ``Tool``."""

    def __init__(
        self,
        name: str,
        description: str,
        parameters: dict,
        func: Callable[..., Any],
        *,
        output_schema: dict | None = None,
        strict: bool = False,
    ) -> None:
        self._name = name
        self._description = description
        self._parameters = parameters
        self._func = func
        self._output_schema = output_schema
        self._strict = strict

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def parameters(self) -> dict:
        return self._parameters

    @property
    def output_schema(self) -> dict | None:
        return self._output_schema

    @property
    def strict(self) -> bool:
        return self._strict

    def execute(self, **kwargs) -> Any:
        return self._func(**kwargs)

    def __repr__(self) -> str:
        return f"FunctionTool(name={self._name!r})"
