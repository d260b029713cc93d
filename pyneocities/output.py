"""Console output helpers built on rich."""

from typing import Optional

from rich.console import Console


class OutputFormatter:
    """Prints user-facing messages.

    Status messages go to stderr so that they never mix with data a
    caller might pipe. ``quiet`` suppresses everything except errors.
    """

    def __init__(self, quiet: bool = False, console: Optional[Console] = None):
        self.quiet = quiet
        self.console = console or Console(stderr=True, highlight=False)

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(message)

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[bright_green]{message}[/bright_green]")

    def warning(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[yellow]{message}[/yellow]")

    def error(self, message: str) -> None:
        self.console.print(f"[bright_red]{message}[/bright_red]")
