"""Console output helpers — step headers and status markers."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape


class StatusPrinter:
    """Prints progress lines with ✓ / ✗ / ⚠ / ℹ markers."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def step(self, number: int, total: int, title: str) -> None:
        self.console.print(f"\n[bold blue]\\[Step {number}/{total}][/] {escape(title)}")

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/] {escape(message)}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/] {escape(message)}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]ℹ[/] {escape(message)}")

    def text(self, message: str = "") -> None:
        self.console.print(escape(message))

    def heading(self, message: str, style: str = "yellow") -> None:
        self.console.print(f"\n[{style}]{escape(message)}[/]")

    def numbered(self, lines: list[str], indent: str = "  ") -> None:
        for i, line in enumerate(lines, 1):
            self.console.print(f"{indent}{i}. {escape(line)}")

    def bullets(self, lines: list[str], indent: str = "  ") -> None:
        for line in lines:
            self.console.print(f"{indent}- {escape(line)}")

    def banner(self, lines: list[str], style: str = "blue") -> None:
        rule = "=" * 32
        self.console.print(f"[{style}]{rule}[/]")
        for line in lines:
            self.console.print(f"[{style}]{escape(line)}[/]")
        self.console.print(f"[{style}]{rule}[/]")
