"""
Interactive terminal helpers for PostgreSQL Backup Manager
"""

from typing import Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt


class Terminal:
    """Prompts and prints for the interactive steps.

    Everything that reads from the keyboard goes through this class so the
    executors can be driven by a scripted stand-in in tests.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False)

    def ask(self, label: str, default: str = "") -> str:
        """Ask for a value; an empty answer returns ``default``"""
        answer = Prompt.ask(label, default=default, console=self.console, show_default=True)
        return (answer or "").strip()

    def ask_raw(self, label: str) -> str:
        """Ask for a value with no default"""
        return Prompt.ask(label, default="", console=self.console, show_default=False).strip()

    def confirm(self, label: str, default: bool = False) -> bool:
        return Confirm.ask(label, default=default, console=self.console)

    def print(self, message: str = "") -> None:
        self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        self.console.print(f"OK: {message}", style="green", markup=False)

    def error(self, message: str) -> None:
        self.console.print(f"ERROR: {message}", style="red", markup=False)

    def header(self, title: str) -> None:
        self.console.rule(title)
