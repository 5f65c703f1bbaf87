"""Click CLI for the continuous monitor.

Commands:
- run: Poll and publish snapshots until interrupted
- once: Run a single cycle and print the snapshot
- dmesg: Print kernel log entries after a timestamp
- metrics: Print numeric usage metrics and host summary
- process: Print thread-heavy processes (--check: the busiest one)
- status: Show the stored checkpoint
- reset: Clear the stored checkpoint
- serve: Serve the last snapshot over HTTP
"""

import asyncio
import json
import logging
import sys
from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from continuous_monitor import __version__
from continuous_monitor.config import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_STATE_DIR,
    ENV_PREFIX,
    MonitorConfig,
    interval_from_parts,
)
from continuous_monitor.logs import DmesgLogSource, extract_text
from continuous_monitor.monitor import Monitor
from continuous_monitor.state import CheckpointStore
from continuous_monitor.system import CommandRunner, HostSnapshotProvider, read_boot_id
from continuous_monitor.system.metrics import collect_metrics
from continuous_monitor.system.processes import (
    MIN_THREADS,
    check_max_threads_process,
    collect_processes,
)
from continuous_monitor.utils.errors import CollectorError, StateDirectoryError
from continuous_monitor.utils.log import setup_logging

console = Console()
logger = logging.getLogger(__name__)


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


def _open_store(ctx) -> CheckpointStore:
    try:
        return CheckpointStore(ctx.obj["config"].state_dir)
    except StateDirectoryError as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--state-dir",
    envvar=f"{ENV_PREFIX}STATE_DIR",
    default=str(DEFAULT_STATE_DIR),
    show_default=True,
    help="Directory holding the checkpoint",
)
@click.option(
    "--output",
    "output_file",
    envvar=f"{ENV_PREFIX}OUTPUT",
    default=str(DEFAULT_OUTPUT_FILE),
    show_default=True,
    help="Snapshot file to overwrite each cycle",
)
@click.option(
    "--command-timeout",
    envvar=f"{ENV_PREFIX}COMMAND_TIMEOUT",
    type=float,
    default=10.0,
    help="Timeout for host commands in seconds",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug logging",
)
@click.pass_context
def cli(ctx, state_dir: str, output_file: str, command_timeout: float, debug: bool):
    """Continuous Monitor - publish host snapshots with incremental kernel logs."""
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = MonitorConfig(
            state_dir=state_dir,
            output_file=output_file,
            command_timeout=command_timeout,
        )
    except ValueError as e:
        raise click.BadParameter(str(e))
    ctx.obj["debug"] = debug

    level = "DEBUG" if debug else "INFO"
    setup_logging(level=level)


def _print_event(event: str, message: str) -> None:
    stamp = datetime.now().strftime("%H:%M:%S")
    if event == "reboot":
        console.print(f"[yellow]{escape(message)}[/]")
    elif event == "published":
        console.print(f"[{stamp}] {escape(message)}")
    else:
        console.print(f"[red][{stamp}] {escape(message)}[/]")


@cli.command()
@click.option(
    "--interval",
    envvar=f"{ENV_PREFIX}INTERVAL",
    type=float,
    help=f"Seconds between cycles (default {DEFAULT_INTERVAL_SECONDS:g})",
)
@click.option("--min", "minutes", type=int, help="Interval minutes")
@click.option("--sec", "seconds", type=float, help="Interval seconds")
@click.option("--cycles", type=int, help="Stop after this many cycles")
@click.pass_context
def run(
    ctx,
    interval: Optional[float],
    minutes: Optional[int],
    seconds: Optional[float],
    cycles: Optional[int],
):
    """Poll and publish snapshots until interrupted."""
    config: MonitorConfig = ctx.obj["config"]

    try:
        if minutes is not None or seconds is not None:
            config.interval_seconds = interval_from_parts(minutes or 0, seconds or 0)
        elif interval is not None:
            config.interval_seconds = interval_from_parts(seconds=interval)
    except ValueError as e:
        raise click.BadParameter(str(e))

    try:
        monitor = Monitor.from_config(config, on_event=_print_event)
    except StateDirectoryError as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        sys.exit(1)

    console.print("[bold]Starting continuous monitoring (Ctrl+C to stop)...[/]")
    try:
        run_async(monitor.run(max_cycles=cycles))
    except KeyboardInterrupt:
        console.print(f"\nStopped after {monitor.cycles} cycle(s)")


@cli.command()
@click.pass_context
def once(ctx):
    """Run a single cycle and print the published snapshot."""
    config: MonitorConfig = ctx.obj["config"]
    try:
        monitor = Monitor.from_config(config)
    except StateDirectoryError as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        sys.exit(1)

    result = run_async(monitor.run_cycle())
    click.echo(result.snapshot.to_json())
    for error in result.errors:
        console.print(f"[yellow]Warning: {escape(error)}[/]", highlight=False)


@cli.command()
@click.option(
    "--since",
    type=float,
    help="Only show entries after this many seconds since boot (e.g. 4.5)",
)
@click.pass_context
def dmesg(ctx, since: Optional[float]):
    """Print kernel log entries, optionally only those after a timestamp."""
    config: MonitorConfig = ctx.obj["config"]
    source = DmesgLogSource(CommandRunner(config.command_timeout), config.dmesg_command)

    try:
        raw = run_async(source.read_raw())
    except CollectorError as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        sys.exit(1)

    if since is None:
        click.echo(raw, nl=False)
        result = extract_text(raw)
    else:
        result = extract_text(raw, since)
        if result.text:
            click.echo(result.text)
    logger.info(f"{len(result.new_entries)} entries, last timestamp {result.new_offset:.6f}")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print numeric metrics as JSON")
@click.pass_context
def metrics(ctx, as_json: bool):
    """Print numeric usage metrics and the host summary."""
    config: MonitorConfig = ctx.obj["config"]
    sample = collect_metrics()

    if as_json:
        click.echo(json.dumps([sample.to_dict()], indent=2))
        return

    table = Table(title=f"Metrics ({sample.server_id})")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("CPU", f"{sample.cpu_usage:.1f}%")
    table.add_row("Memory", f"{sample.memory_usage:.1f}%")
    table.add_row("Disk", f"{sample.disk_usage:.1f}%")
    table.add_row("IO read", f"{sample.io_read:.1f} MB")
    table.add_row("IO write", f"{sample.io_write:.1f} MB")
    table.add_row("Network in", f"{sample.network_in:.1f} KB")
    table.add_row("Network out", f"{sample.network_out:.1f} KB")
    console.print(table)

    provider = HostSnapshotProvider(CommandRunner(config.command_timeout))
    host = run_async(provider.collect())

    table = Table(title="Host Snapshot")
    table.add_column("Field")
    table.add_column("Value")
    for name, value in host.to_dict().items():
        table.add_row(name, escape(value) or "-")

    console.print(table)


@cli.command()
@click.option("--check", is_flag=True, help="Only show the process with the most threads")
@click.option(
    "--min-threads",
    type=int,
    default=MIN_THREADS,
    show_default=True,
    help="Skip processes with fewer threads",
)
def process(check: bool, min_threads: int):
    """Print thread-heavy processes as JSON."""
    if check:
        busiest = check_max_threads_process()
        if busiest is None:
            console.print("[yellow]No processes visible[/]")
            sys.exit(1)
        click.echo(json.dumps(busiest.to_dict(), indent=2))
        console.print(
            f"[bold]{escape(busiest.name)}[/] (pid {busiest.pid}) has "
            f"{busiest.thread_count} threads",
            highlight=False,
        )
        return

    processes = collect_processes(min_threads=min_threads)
    click.echo(json.dumps([p.to_dict() for p in processes], indent=2))


@cli.command()
@click.pass_context
def status(ctx):
    """Show the stored checkpoint and the current boot id."""
    config: MonitorConfig = ctx.obj["config"]
    store = _open_store(ctx)
    checkpoint = store.load()
    current = read_boot_id(config.boot_id_path)

    table = Table(title="Checkpoint")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("State directory", str(store.state_dir))
    table.add_row("Stored boot id", checkpoint.boot_id or "-")
    table.add_row("Current boot id", current)
    table.add_row("Last log offset", f"{checkpoint.last_log_offset:.6f}")
    console.print(table)

    if checkpoint.boot_id and checkpoint.boot_id != current:
        console.print("[yellow]Boot id differs: offset will reset on next cycle[/]")


@cli.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def reset(ctx, yes: bool):
    """Clear the stored checkpoint so the whole buffer is reported again."""
    store = _open_store(ctx)
    if not yes:
        click.confirm(f"Clear checkpoint in {store.state_dir}?", abort=True)
    store.reset()
    console.print("[green]Checkpoint cleared[/]")


@cli.command()
@click.option("--port", default=8080, help="Port to serve on")
@click.option("--host", default="0.0.0.0", help="Address to bind")
@click.pass_context
def serve(ctx, port: int, host: str):
    """Serve the last published snapshot over HTTP."""
    from continuous_monitor.web.server import run_server

    config: MonitorConfig = ctx.obj["config"]
    console.print(f"[bold green]Serving snapshots on http://{host}:{port}[/]")
    run_server(
        port=port,
        host=host,
        output_file=config.output_file,
        state_dir=config.state_dir,
    )


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
