"""Terminal UI for the concierge CLI

Rich-based terminal interface providing:
- Interactive REPL mode
- Markdown rendering for replies
- Slash command handling
"""

import asyncio
import uuid

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from concierge.core.orchestrator import AgentOrchestrator, AssistantMessage, TurnContext


class TerminalUI:
    """Rich-based terminal user interface"""

    def __init__(self, orchestrator: AgentOrchestrator, session_id: str = None, user_id: str = "cli-user"):
        self.orchestrator = orchestrator
        self.session_id = session_id or f"cli-{uuid.uuid4().hex[:8]}"
        self.user_id = user_id
        self.console = Console()
        # One loop for the whole CLI so per-session locks stay bound to it
        self._loop = asyncio.new_event_loop()

    def close(self):
        self._loop.close()

    def start_interactive(self):
        """Start interactive REPL mode"""
        self.console.print(Panel(
            f"Session [cyan]{self.session_id}[/cyan]\nType [cyan]/help[/cyan] for commands.",
            title="Advisor Concierge",
            border_style="cyan"
        ))

        while True:
            try:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")

                if not user_input.strip():
                    continue

                if user_input.startswith("/"):
                    self._handle_command(user_input)
                    continue

                self._send(user_input)

            except KeyboardInterrupt:
                self.console.print("\n[yellow]Use /exit or Ctrl+D to quit[/yellow]")
                continue
            except EOFError:
                self.console.print("\n[cyan]Goodbye![/cyan]")
                break

    def execute_one_shot(self, prompt: str):
        """Send a single message and print the reply"""
        self._send(prompt)

    def _send(self, text: str):
        with self.console.status("[cyan]Thinking...[/cyan]"):
            reply = self._loop.run_until_complete(
                self.orchestrator.process_message(
                    text, TurnContext(session_id=self.session_id, user_id=self.user_id)
                )
            )
        self._display_reply(reply)

    def _display_reply(self, reply: AssistantMessage):
        meta = reply.metadata
        self.console.print(f"\n[bold magenta]{reply.agent_id}:[/bold magenta]")
        self.console.print(Markdown(reply.content))

        details = [f"{meta.get('processing_time_ms', 0):.0f}ms"]
        if meta.get("confidence") is not None:
            details.append(f"confidence {meta['confidence']:.2f}")
        if meta.get("deep_agent"):
            details.append(f"tasks {meta.get('tasks_completed', 0)}/{meta.get('total_tasks', 0)}")
        if meta.get("tools_used"):
            details.append("tools: " + ", ".join(meta["tools_used"]))
        if meta.get("is_repeated_query"):
            details.append("repeated")
        self.console.print(f"[dim]{' | '.join(details)}[/dim]")

        if meta.get("error"):
            self.console.print(f"[yellow]⚠️ Degraded reply: {meta['error']}[/yellow]")

    def _handle_command(self, command: str):
        cmd_parts = command[1:].split()
        if not cmd_parts:
            return

        cmd_name = cmd_parts[0].lower()
        if cmd_name == "help":
            self._cmd_help()
        elif cmd_name == "stats":
            self._cmd_stats()
        elif cmd_name == "history":
            self._cmd_history()
        elif cmd_name == "responders":
            self._cmd_responders()
        elif cmd_name in ["exit", "quit"]:
            raise EOFError()
        else:
            self.console.print(f"[red]Unknown command: {cmd_name}[/red]")
            self.console.print("Type [cyan]/help[/cyan] for available commands")

    def _cmd_help(self):
        help_text = """
# Available Commands

- `/history` - Show recent messages in this session
- `/stats` - Show orchestrator statistics
- `/responders` - List registered responders
- `/help` - Show this help message
- `/exit` or `/quit` - Exit CLI (also Ctrl+D)
        """
        self.console.print(Markdown(help_text))

    def _cmd_stats(self):
        stats = self.orchestrator.get_stats()

        table = Table(show_header=False, box=None)
        table.add_column("Key", style="cyan")
        table.add_column("Value")

        table.add_row("Sessions", f"{stats['total_sessions']} ({stats['active_sessions']} active)")
        table.add_row("Messages", str(stats["total_messages"]))
        table.add_row("Avg response", f"{stats['average_response_time_ms']:.0f}ms")
        table.add_row("Health", stats["system_health"])
        for responder_id, count in sorted(stats["responder_usage"].items()):
            table.add_row(f"  {responder_id}", str(count))

        self.console.print(Panel(table, title="Orchestrator Stats", border_style="cyan"))

    def _cmd_history(self):
        history = self._loop.run_until_complete(self.orchestrator.get_history(self.session_id))
        if not history:
            self.console.print("[yellow]No conversation history yet[/yellow]")
            return

        self.console.print(f"\n[bold cyan]Conversation History[/bold cyan] ({len(history)} messages)\n")
        for i, msg in enumerate(history, 1):
            role_color = "cyan" if msg.role == "user" else "magenta"
            role_name = "You" if msg.role == "user" else (msg.agent_id or "AI")
            content = msg.content if len(msg.content) <= 200 else msg.content[:200] + "..."
            self.console.print(
                f"[bold {role_color}][{i}] {role_name}[/bold {role_color}] ({msg.timestamp:%H:%M:%S})"
            )
            self.console.print(f"  {content}\n")

    def _cmd_responders(self):
        table = Table(title="Responders")
        table.add_column("ID", style="cyan")
        table.add_column("Priority", justify="right")
        table.add_column("Specialties")
        for item in self.orchestrator.get_responder_list():
            table.add_row(item["id"], str(item["priority"]), ", ".join(item["specialties"]))
        self.console.print(table)
