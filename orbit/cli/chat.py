"""Interactive chat session handler."""

from __future__ import annotations

import asyncio

from rich.console import Console
from rich.markdown import Markdown

from orbit.cli.output import OutputFormatter
from orbit.errors import OrbitError
from orbit.orchestrator.core import Agent


class ChatHandler:
    """
    Manages the interactive chat loop.

    Handles streaming or whole-answer output and inline slash commands.
    """

    def __init__(
        self,
        agent: Agent,
        console: Console | None = None,
        stream: bool = True,
    ) -> None:
        self.agent = agent
        self.console = console or Console()
        self.formatter = OutputFormatter(self.console)
        self.stream = stream
        self._running = True

    async def handle_command(self, command: str) -> bool:
        """
        Handle inline commands. Returns True if the command was handled.
        """
        cmd = command.strip().split(None, 1)[0].lower()

        if cmd == "/quit":
            self._running = False
            self.console.print("[dim]Goodbye.[/dim]")
            return True

        if cmd == "/clear":
            self.agent.clear_history()
            self.console.print("[dim]History cleared.[/dim]")
            return True

        if cmd == "/history":
            self.formatter.format_history(self.agent.get_history())
            return True

        if cmd == "/tools":
            self.formatter.format_tool_list(self.agent.get_tools())
            return True

        if cmd == "/help":
            self.console.print(
                "  [bold]Commands:[/bold]\n"
                "  /quit     - Exit the chat\n"
                "  /clear    - Forget the conversation so far\n"
                "  /history  - Show stored messages\n"
                "  /tools    - List available tools\n"
                "  /help     - Show this help\n"
            )
            return True

        return False

    async def handle_input(self, user_input: str) -> None:
        """Send user input through the agent and print the answer."""
        try:
            if self.stream:
                async for delta in self.agent.send_stream(user_input):
                    self.console.print(delta, end="", markup=False, highlight=False)
                self.console.print()
            else:
                answer = await self.agent.send(user_input)
                self.console.print(Markdown(answer))
        except OrbitError as e:
            self.console.print()
            self.formatter.format_error(e)

    async def run_loop(self) -> None:
        """Main interactive loop."""
        self.console.print(
            "[bold]Orbit[/bold] - Conversational Agent\n"
            "[dim]Type /help for commands, /quit to exit.[/dim]\n"
        )
        if not self.agent.is_configured():
            self.console.print("[yellow]Warning:[/yellow] no API key configured.\n")

        loop = asyncio.get_running_loop()
        while self._running:
            try:
                user_input = await loop.run_in_executor(
                    None, lambda: input("you> ").strip()
                )
            except (EOFError, KeyboardInterrupt):
                self.console.print("\n[dim]Goodbye.[/dim]")
                break

            if not user_input:
                continue

            if user_input.startswith("/"):
                handled = await self.handle_command(user_input)
                if handled:
                    continue

            self.console.print("[dim]assistant>[/dim] ", end="")
            await self.handle_input(user_input)
