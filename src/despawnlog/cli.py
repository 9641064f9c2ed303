"""Operator CLI for inspecting and maintaining a despawn log directory."""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .config import CONFIG_FILENAME, ConfigError, load_config, write_default_config
from .logwriter import LogWriter
from .plugin import LOG_DIRNAME, configure_logging
from .reconciler import BEFORE_SHUTDOWN_FILENAME
from .snapshot import SnapshotError, SnapshotStore
from .timeutil import parse_day_reference

console = Console()

DEFAULT_DATA_DIR = Path("plugins") / "DespawnLogger"


def _load(ctx):
    try:
        return load_config(ctx.obj["data_dir"] / CONFIG_FILENAME)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)


@click.group()
@click.option(
    "--data-dir",
    envvar="DESPAWNLOG_DATA_DIR",
    type=click.Path(path_type=Path),
    default=DEFAULT_DATA_DIR,
    show_default=True,
    help="Plugin data directory (config.yml, logs/, snapshots)",
)
@click.pass_context
def cli(ctx, data_dir):
    """DespawnLogger - inspect daily despawn logs and restart snapshots."""
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    configure_logging(data_dir, level=logging.WARNING)


@cli.command()
@click.pass_context
def init(ctx):
    """Write the default config.yml."""
    path = ctx.obj["data_dir"] / CONFIG_FILENAME
    if write_default_config(path):
        console.print(f"[green]✓[/green] Wrote default config to {path}")
    else:
        console.print(f"[yellow]![/yellow] Config already exists at {path}")


@cli.command()
@click.pass_context
def status(ctx):
    """Show configuration, log files and pending snapshot."""
    data_dir = ctx.obj["data_dir"]
    config = _load(ctx)
    writer = LogWriter(data_dir / LOG_DIRNAME)

    table = Table(title="DespawnLogger")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("restart-check-enabled", str(config.restart_check_enabled))
    table.add_row("chunk-unload-logging", str(config.chunk_unload_logging))
    table.add_row("log-nametags", str(config.log_nametags))
    table.add_row("max-log-files", str(config.max_log_files))
    table.add_row("loggable-entities", ", ".join(config.loggable_entities) or "(none)")
    console.print(table)

    files = writer.log_files()
    console.print(f"Log files: [bold]{len(files)}[/bold] / {config.max_log_files}")

    before = SnapshotStore(data_dir / BEFORE_SHUTDOWN_FILENAME)
    if before.exists():
        console.print("[yellow]Restart check pending[/yellow] (before-shutdown snapshot present)")
    else:
        console.print("[green]No restart check pending[/green]")


@cli.command()
@click.argument("when", default="today")
@click.pass_context
def show(ctx, when):
    """Print one day's despawn log (today, yesterday, '3 days ago', 2025-01-15)."""
    try:
        day = parse_day_reference(when)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    writer = LogWriter(ctx.obj["data_dir"] / LOG_DIRNAME)
    lines = writer.read_day(day)
    if not lines:
        console.print(f"No despawns logged on {day.isoformat()}.")
        return

    for line in lines:
        click.echo(line)


@cli.command()
@click.pass_context
def prune(ctx):
    """Apply log retention once (deletes at most one file)."""
    config = _load(ctx)
    writer = LogWriter(ctx.obj["data_dir"] / LOG_DIRNAME)
    deleted = writer.enforce_retention(config.max_log_files)
    if deleted is None:
        console.print(f"[green]✓[/green] Within limit ({config.max_log_files} files)")
    else:
        console.print(f"[green]✓[/green] Deleted oldest log file: {deleted.name}")


@cli.command()
@click.pass_context
def pending(ctx):
    """List entities recorded in the before-shutdown snapshot."""
    store = SnapshotStore(ctx.obj["data_dir"] / BEFORE_SHUTDOWN_FILENAME)
    if not store.exists():
        console.print("No before-shutdown snapshot.")
        return

    try:
        snapshot = store.read()
    except SnapshotError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    table = Table(title=f"Before shutdown ({len(snapshot)} entities)")
    table.add_column("ID", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Location")
    for entity_id, record in snapshot.items():
        table.add_row(entity_id, record.type_tag, record.location)
    console.print(table)


if __name__ == "__main__":
    cli()
