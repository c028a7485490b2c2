"""Output formatting for the PyAssetSync CLI."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text


class OutputFormatter:
    """Prints CLI messages, tables and JSON through a rich console."""

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine readable JSON instead of text
            quiet: Suppress non-essential output
            console: Console to print to (defaults to stdout)
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(highlight=False, soft_wrap=True)

    def print(self, message: str = "") -> None:
        if not self.json_output:
            self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            self.console.print(f"✓ {message}", style="green", markup=False)

    def warning(self, message: str) -> None:
        if not self.json_output:
            self.console.print(f"Warning: {message}", style="yellow", markup=False)

    def error(self, message: str) -> None:
        self.console.print(f"Error: {message}", style="bold red", markup=False)

    def output_json(self, data: Any) -> None:
        self.console.print(json.dumps(data, indent=2), markup=False)

    def output_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a table.

        Args:
            headers: Column headers
            rows: Table rows, one string per column
            title: Optional table title
        """
        table = Table(title=title, show_lines=False)
        for header in headers:
            table.add_column(header, overflow="fold")
        for row in rows:
            table.add_row(*(Text(cell) for cell in row))
        self.console.print(table)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a titled list of label/value pairs."""
        if self.quiet or self.json_output:
            return
        self.console.print(f"\n{title}", style="bold", markup=False)
        self.console.print("─" * len(title), markup=False)
        for label, value in items:
            self.console.print(f"{label}: {value}", markup=False)
