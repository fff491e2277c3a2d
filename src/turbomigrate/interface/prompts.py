"""
Prompter implementations.

``RichPrompter`` draws numbered menus with rich and reads the answer with
``IntPrompt``/``Confirm``. ``NonInteractivePrompter`` is used without a TTY:
it takes defaults where one exists and cancels otherwise.
"""

from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, IntPrompt

from turbomigrate.domain.prompts import MenuOption
from turbomigrate.domain.results import Cancelled, Choice, Failure, Success


class RichPrompter:
    """Interactive prompts on a rich console."""

    def __init__(self, console: Console):
        self.console = console

    def select(
        self,
        message: str,
        options: Sequence[MenuOption],
        default_index: Optional[int] = None,
    ) -> Choice[int]:
        if not options:
            return Failure(Cancelled(message, reason="no options"))

        self.console.print(f"\n[bold yellow]{message}[/bold yellow]")
        for i, option in enumerate(options, 1):
            marker = "[bold green]>[/bold green]" if default_index == i - 1 else " "
            hint = f"  [dim]{escape(option.hint)}[/dim]" if option.hint else ""
            self.console.print(f"  {marker} [{i}] {_highlight(option.label)}{hint}", highlight=False)

        default = default_index + 1 if default_index is not None else None
        try:
            while True:
                choice = IntPrompt.ask(
                    f"  Enter number (1-{len(options)})",
                    default=default,
                    console=self.console,
                )
                if choice is not None and 1 <= choice <= len(options):
                    return Success(choice - 1)
                self.console.print(
                    f"  [red]Please enter a number between 1 and {len(options)}[/red]"
                )
        except (KeyboardInterrupt, EOFError):
            self.console.print()
            return Failure(Cancelled(message))

    def confirm(self, message: str, default: bool = False) -> Choice[bool]:
        try:
            return Success(Confirm.ask(message, default=default, console=self.console))
        except (KeyboardInterrupt, EOFError):
            self.console.print()
            return Failure(Cancelled(message))


class NonInteractivePrompter:
    """Answers prompts without a terminal."""

    def select(
        self,
        message: str,
        options: Sequence[MenuOption],
        default_index: Optional[int] = None,
    ) -> Choice[int]:
        # A menu always needs a human: there is no safe default target
        return Failure(Cancelled(message, reason="no terminal to choose from"))

    def confirm(self, message: str, default: bool = False) -> Choice[bool]:
        return Success(default)


def _highlight(label: str) -> str:
    """Colour the NEWEST marker of a migration label."""
    if label.startswith("NEWEST "):
        return f"[magenta]NEWEST[/magenta] {escape(label[len('NEWEST '):])}"
    return escape(label)
