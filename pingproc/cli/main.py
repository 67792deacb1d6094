"""
Main CLI application using Typer.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from pingproc.cli.formatters import format_ping_result, print_launch_error, print_system_info
from pingproc.core.cancellation import CancellationTokenSource
from pingproc.core.config import AppConfig, load_config_file
from pingproc.core.detector import SystemDetector
from pingproc.core.errors import LaunchError, RunCancelled
from pingproc.core.result import PingResult
from pingproc.storage.logger import setup_logging
from pingproc.tasks.handles import PingHandle, flatten
from pingproc.tasks.ping_process import PingProcess

EXIT_LAUNCH_FAILED = 127
EXIT_CANCELLED = 130

app = typer.Typer(
    name="pingproc",
    help="Run the system ping utility and capture its output",
    add_completion=False,
)

console = Console()


def _init_context(output_dir: Optional[Path], verbose: bool, workers: Optional[int] = None):
    """
    Build config and logger.
    Uses optional config file (~/.pingproc.yaml or ./.pingproc.yaml) for defaults when CLI does not set values.
    """
    file_cfg = load_config_file()
    if output_dir is not None:
        file_cfg["output_dir"] = output_dir
    if verbose:
        file_cfg["verbose"] = True
    if workers is not None:
        file_cfg["max_workers"] = workers
    config = AppConfig(**file_cfg)

    logger = setup_logging(config.ensure_output_dir(), config.verbose)
    return config, logger


def _observe(handle: PingHandle, source: CancellationTokenSource) -> PingResult:
    """Block on the handle; Ctrl-C cancels the run and waits for the kill."""
    try:
        return handle.result()
    except KeyboardInterrupt:
        source.cancel()
        handle.outcome()
        raise RunCancelled(handle.target)


@app.command()
def run(
    hosts: List[str] = typer.Argument(..., help="Host names or addresses to ping, in output order"),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory for log files",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print the result as JSON",
    ),
    stream: bool = typer.Option(
        False,
        "--stream",
        help="Print output lines as they arrive (single host only)",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Maximum concurrent ping processes for several hosts",
    ),
):
    """
    Ping one or more hosts. The exit status is ping's own exit code.
    """
    if stream and len(hosts) != 1:
        console.print("[red]--stream works with a single host only[/red]")
        raise typer.Exit(2)

    config, logger = _init_context(output_dir, verbose, workers)
    source = CancellationTokenSource()

    with PingProcess(config) as pinger:
        if stream:
            handle = pinger.run_long_running(
                hosts[0],
                progress_output=lambda line: console.print(line, markup=False, highlight=False),
                progress_error=lambda line: console.print(line, style="red", markup=False, highlight=False),
                cancel_token=source.token,
            )
        elif len(hosts) == 1:
            handle = pinger.run_async(hosts[0], source.token)
        else:
            handle = pinger.run_many(hosts, source.token)

        try:
            result = _observe(handle, source)
        except RunCancelled:
            console.print("\n[yellow]Cancelled by user.[/yellow]")
            raise typer.Exit(EXIT_CANCELLED)
        except ExceptionGroup as group:
            for error in flatten(group):
                if isinstance(error, LaunchError):
                    print_launch_error(error, SystemDetector().get_installation_suggestion(), console)
                    raise typer.Exit(EXIT_LAUNCH_FAILED)
                if isinstance(error, RunCancelled):
                    console.print("[yellow]Cancelled.[/yellow]")
                    raise typer.Exit(EXIT_CANCELLED)
            raise

    logger.debug(f"Ping finished with return code {result.exit_code}")

    if json_output:
        payload = result.model_dump(mode="json")
        payload["targets"] = list(hosts)
        typer.echo(json.dumps(payload, indent=2))
    else:
        format_ping_result(result, hosts, console, show_output=not stream)

    raise typer.Exit(result.exit_code)


@app.command()
def info(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """
    Show system information and the ping command that will be run.
    """
    file_cfg = load_config_file()
    config = AppConfig(**file_cfg)
    detector = SystemDetector()
    command = detector.ping_command(config.ping_executable, config.ping_args)
    print_system_info(detector.detect_system(), command, detector.get_tool_path(config.ping_executable))
    if verbose:
        console.print(f"[dim]Config: {config.model_dump(mode='json')}[/dim]")
