"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from prodprof.models.profiling import ProfilingResultByFile
    from prodprof.parsing.mapping import MappingTable

console = Console()

_HIGH_RATE = 80.0
_MEDIUM_RATE = 50.0


def _rate_color(percentage: float) -> str:
    """Return a Rich color name for an execution-rate percentage."""
    if percentage >= _HIGH_RATE:
        return "green"
    if percentage >= _MEDIUM_RATE:
        return "yellow"
    return "red"


class CLIReporter:
    """Rich terminal output for profiling runs."""

    def __init__(self) -> None:
        """Initialize the CLI reporter."""
        self.console = console

    def print_header(self, title: str) -> None:
        """Print a bold header."""
        self.console.print(f"\n[bold cyan]{title}[/bold cyan]\n")

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    def print_profiling_summary(
        self,
        results: list[ProfilingResultByFile],
        report_count: int,
    ) -> None:
        """Print one row per source file with its point execution rate."""
        table = Table(title=f"Profiling Summary ({report_count} reports)", title_style="bold cyan")
        table.add_column("File", style="bold")
        table.add_column("Functions", justify="right")
        table.add_column("Points", justify="right")
        table.add_column("Executed", justify="right")

        total_points = 0
        total_executed = 0
        for file_result in results:
            points = file_result.point_count
            executed = file_result.executed_point_count
            total_points += points
            total_executed += executed
            table.add_row(
                file_result.file_name,
                str(len(file_result.profiling_data_per_function)),
                str(points),
                self._format_rate(executed, points),
            )

        table.add_section()
        table.add_row(
            "[bold]Overall[/bold]",
            "",
            f"[bold]{total_points}[/bold]",
            self._format_rate(total_executed, total_points),
        )

        self.console.print(table)

    def print_mapping_summary(self, mapping: MappingTable) -> None:
        """Print the sizes of a parsed instrumentation mapping."""
        table = Table(title="Instrumentation Mapping", title_style="bold cyan")
        table.add_column("Section", style="bold")
        table.add_column("Entries", justify="right")

        table.add_row("Files", str(len(mapping.file_names)))
        table.add_row("Functions", str(len(mapping.function_names)))
        table.add_row("Types", ", ".join(kind.value for kind in mapping.types) or "-")
        table.add_row("Points", str(len(mapping)))

        self.console.print(table)

    def _format_rate(self, executed: int, total: int) -> str:
        """Format ``executed/total`` with a colored percentage."""
        if total == 0:
            return "[dim]-[/dim]"
        percentage = executed / total * 100
        color = _rate_color(percentage)
        return f"{executed}/{total} [{color}]({percentage:.1f}%)[/{color}]"


# Singleton instance for easy import
reporter = CLIReporter()
