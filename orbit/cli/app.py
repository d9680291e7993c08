"""
Main CLI application for orbit.

Usage:
    orbit chat [--system TEXT] [--context-file PATH] [--stream/--no-stream]
    orbit ask TEXT [--stream]
    orbit tools list|info
    orbit config show|validate
    orbit version
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console

from orbit.config import OrbitConfig, load_config, validate_config

app = typer.Typer(name="orbit", help="Orbit - tool-calling conversational agent")
tools_app = typer.Typer(help="Tool management")
config_app = typer.Typer(help="Configuration management")

app.add_typer(tools_app, name="tools")
app.add_typer(config_app, name="config")

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get_config_path() -> Path | None:
    """Find config file in standard locations."""
    candidates = [
        Path.cwd() / "orbit.yaml",
        Path.cwd() / "orbit.yml",
        Path.home() / ".config" / "orbit" / "config.yaml",
    ]
    for p in candidates:
        if p.is_file():
            return p
    return None


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _build_agent(cfg: OrbitConfig, context_file: Path | None = None):
    """Wire provider, built-in tools and agent from config."""
    from orbit.llm.providers.openai_compat import OpenAICompatProvider
    from orbit.orchestrator.core import Agent
    from orbit.session.context import ProfileContextSource, load_context
    from orbit.tools.builtin import builtin_tools

    provider = OpenAICompatProvider(
        url=cfg.llm.base_url,
        model=cfg.llm.model,
        api_key=cfg.api_key(),
        chat_path=cfg.llm.chat_path,
    )
    agent = Agent(provider, cfg.agent, tools=builtin_tools())

    if context_file is not None:
        with context_file.open("r", encoding="utf-8") as f:
            profile = yaml.safe_load(f) or {}
        source = ProfileContextSource({context_file.stem: profile})
        load_context(agent, source, context_file.stem)

    return agent


def _load(system: str | None = None) -> OrbitConfig:
    return load_config(
        _get_config_path(),
        cli_overrides={"agent.system_message": system},
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def chat(
    system: Optional[str] = typer.Option(None, "--system", help="System message"),
    context_file: Optional[Path] = typer.Option(
        None, "--context-file", exists=True, dir_okay=False, help="YAML profile injected as context"
    ),
    stream: bool = typer.Option(True, "--stream/--no-stream", help="Stream the answer"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Start an interactive chat session."""
    from orbit.cli.chat import ChatHandler

    _setup_logging(verbose)
    agent = _build_agent(_load(system), context_file)
    handler = ChatHandler(agent, console=console, stream=stream)
    asyncio.run(handler.run_loop())


@app.command()
def ask(
    text: str = typer.Argument(..., help="Question to ask"),
    system: Optional[str] = typer.Option(None, "--system", help="System message"),
    stream: bool = typer.Option(False, "--stream/--no-stream", help="Stream the answer"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Ask a single question and print the answer."""
    from orbit.cli.output import OutputFormatter
    from orbit.errors import OrbitError

    _setup_logging(verbose)
    agent = _build_agent(_load(system))

    async def _run():
        if stream:
            async for delta in agent.send_stream(text):
                console.print(delta, end="", markup=False, highlight=False)
            console.print()
        else:
            console.print(await agent.send(text), markup=False, highlight=False)

    try:
        asyncio.run(_run())
    except OrbitError as e:
        OutputFormatter(console).format_error(e)
        raise typer.Exit(1)


@tools_app.command("list")
def tools_list():
    """List built-in tools."""
    from orbit.cli.output import OutputFormatter
    from orbit.tools.builtin import builtin_tools
    from orbit.tools.registry import ToolRegistry

    registry = ToolRegistry(builtin_tools())
    OutputFormatter(console).format_tool_list(registry.list())


@tools_app.command("info")
def tools_info(tool_name: str = typer.Argument(..., help="Tool name")):
    """Show tool details and schema."""
    from orbit.cli.output import OutputFormatter
    from orbit.tools.builtin import builtin_tools
    from orbit.tools.registry import ToolRegistry

    tool = ToolRegistry(builtin_tools()).get(tool_name)
    if not tool:
        console.print(f"[red]Tool not found:[/red] {tool_name}")
        raise typer.Exit(1)

    OutputFormatter(console).format_tool_info(tool)


@config_app.command("show")
def config_show():
    """Show effective config."""
    from orbit.cli.output import OutputFormatter

    cfg = load_config(_get_config_path())
    OutputFormatter(console).format_config(cfg.to_dict())


@config_app.command("validate")
def config_validate():
    """Validate config and report any problems."""
    config_path = _get_config_path()
    cfg = load_config(config_path)
    errors = validate_config(cfg)

    if config_path:
        console.print(f"  Loaded from: {config_path}")
    else:
        console.print("  [dim]No config file found, using defaults.[/dim]")
    console.print(f"  Endpoint: {cfg.llm.base_url}{cfg.llm.chat_path} ({cfg.llm.model})")

    if errors:
        console.print("[red]Config validation failed:[/red]")
        for e in errors:
            console.print(f"  - {e}", markup=False)
        raise typer.Exit(1)
    console.print("[green]Config is valid.[/green]")


@app.command()
def version():
    """Show version."""
    console.print("orbit v0.1.0")


def main():
    app()


if __name__ == "__main__":
    main()
