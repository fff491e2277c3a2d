"""
Formatted Console Output - Rich Renderer for CLI.

Centralizes how the CLI talks to the user: headers, status lines, the
resolved target card and the spinner.
"""

import contextlib
from typing import ContextManager, Iterator

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from turbomigrate.domain.models import ResolvedTarget


class Icons:
    """UTF-8 Icons."""

    CHECK = "✓"
    CROSS = "✗"
    WARN = "⚠"
    INFO = "ℹ"
    DB = "🗄"
    ARROW = "➜"


class ConsoleRenderer:
    """Renders formatted output to a rich console."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def header(self, title: str):
        """Render a major section header."""
        self.console.print()
        self.console.rule(f"[bold cyan]{escape(title)}[/bold cyan]", align="left")

    def info(self, message: str):
        self.console.print(f"[blue]{Icons.INFO} {escape(message)}[/blue]")

    def success(self, message: str):
        self.console.print(f"[green]{Icons.CHECK} {escape(message)}[/green]")

    def warning(self, message: str):
        self.console.print(f"[yellow]{Icons.WARN} {escape(message)}[/yellow]")

    def error(self, message: str):
        self.console.print(f"[red]{Icons.CROSS} {escape(message)}[/red]")

    def step(self, message: str):
        self.console.print(f"[cyan]{Icons.ARROW} {escape(message)}[/cyan]")

    def spinner(self, message: str) -> ContextManager:
        """Spinner while a step runs, or a plain step line off-terminal."""
        if not self.console.is_terminal:
            return self.static_status(message)
        return self.console.status(f"[cyan]{escape(message)}[/cyan]")

    @contextlib.contextmanager
    def static_status(self, message: str) -> Iterator[None]:
        self.step(message)
        yield

    def render_target(self, target: ResolvedTarget):
        """
        Render the resolved target card.

        Args:
            target: Target about to be (or just) migrated
        """
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column(style="dim")
        table.add_column()
        table.add_row("Environment", escape(target.environment or "(top-level)"))
        table.add_row("Database", escape(target.database.database_name))
        table.add_row("Binding", escape(target.database.binding))
        table.add_row("Database id", escape(target.database.database_id or "-"))
        table.add_row("Mode", target.mode.value)
        table.add_row("Migration", escape(str(target.migration) if target.migration else "(none)"))

        self.header(f"{Icons.DB} Migration target")
        self.console.print(table)
