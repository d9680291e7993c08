"""Output formatting utilities for the CLI."""

from __future__ import annotations

import json

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from orbit.llm.types import Message
from orbit.tools.base import Tool

ROLE_COLORS = {
    "user": "blue",
    "assistant": "green",
    "tool": "cyan",
    "system": "dim",
}

GENERIC_ERROR = "Something went wrong, please try again."


class OutputFormatter:
    """Rich-based output formatting for the orbit CLI."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def format_tool_list(self, tools: list[Tool]) -> None:
        if not tools:
            self.console.print("[dim]No tools registered.[/dim]")
            return

        table = Table(title="Registered Tools", show_lines=True)
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Parameters", no_wrap=True)
        table.add_column("Description")

        for t in tools:
            params = ", ".join(t.parameters.get("properties", {})) or "-"
            table.add_row(t.name, params, t.description)

        self.console.print(table)

    def format_tool_info(self, tool: Tool) -> None:
        self.console.print(Panel(
            f"[bold]{tool.name}[/bold]\n\n"
            f"[dim]Strict arguments:[/dim] {tool.strict}\n"
            f"[dim]Output schema:[/dim] {'yes' if tool.output_schema else 'none'}\n\n"
            f"{tool.description}",
            title=f"Tool: {tool.name}",
        ))
        schema_json = json.dumps(tool.parameters, indent=2)
        self.console.print(Syntax(schema_json, "json", theme="monokai"))

    def format_history(self, messages: list[Message]) -> None:
        if not messages:
            self.console.print("[dim]No messages yet.[/dim]")
            return

        for m in messages:
            color = ROLE_COLORS.get(m.role, "white")
            content = m.content if len(m.content) <= 200 else m.content[:200] + "..."
            self.console.print(f"  [{color}]{m.role:>9s}[/{color}]  ", end="")
            self.console.print(content, markup=False)

    def format_config(self, config: dict) -> None:
        config_json = json.dumps(config, indent=2, default=str)
        self.console.print(Syntax(config_json, "json", theme="monokai"))

    def format_error(self, error: Exception) -> None:
        self.console.print(f"[red]{GENERIC_ERROR}[/red]")
        self.console.print(
            f"{type(error).__name__}: {error}", style="dim", markup=False, highlight=False
        )
