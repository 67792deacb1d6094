"""
Rich formatting utilities for CLI output.
"""

from typing import List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pingproc.core.detector import SystemInfo
from pingproc.core.result import PingResult


def print_system_info(system_info: SystemInfo, command: List[str], tool_path: Optional[str]) -> None:
    """Print detected system information and the ping command in use."""
    console = Console()

    table = Table(title="System Information", show_header=False, box=None)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Operating System", system_info.os_type)
    table.add_row("Platform", system_info.platform)
    table.add_row("Python Version", system_info.python_version)
    table.add_row("Hostname", system_info.hostname)
    table.add_row("Ping Command", " ".join(command) + " <target>")
    table.add_row("Ping Path", tool_path or "[red]not found[/red]")

    console.print()
    console.print(table)
    console.print()


def _status_icon_and_color(exit_code: int) -> tuple[str, str]:
    """Map an exit code to icon and color."""
    if exit_code == 0:
        return "✓", "green"
    return "✗", "red"


def format_ping_result(
    result: PingResult,
    targets: Sequence[str],
    console: Console,
    show_output: bool = True,
) -> None:
    """Format and display a ping result."""
    status_icon, status_color = _status_icon_and_color(result.exit_code)

    content: list[str] = []
    content.append(f"[bold]Targets:[/bold] {', '.join(targets)}")
    content.append(f"[bold]Exit code:[/bold] [{status_color}]{result.exit_code}[/{status_color}]")
    content.append(f"[bold]Lines:[/bold] {len(result.lines())}")

    console.print(
        Panel(
            "\n".join(content),
            title=f"{status_icon} Ping Results",
            border_style=status_color,
            expand=False,
        )
    )

    if show_output and result.std_output:
        console.print(result.std_output, markup=False, highlight=False)
    if result.std_error:
        console.print(result.std_error, style="red", markup=False, highlight=False)


def print_launch_error(error: Exception, suggestion: str, console: Console) -> None:
    """Explain that ping could not be started at all."""
    console.print(
        Panel(
            f"{error}\n\n[dim]Suggestion: {suggestion}[/dim]",
            title="✗ Could not start ping",
            border_style="red",
            expand=False,
        )
    )
