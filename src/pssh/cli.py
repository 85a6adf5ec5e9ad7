"""pssh CLI."""

import logging
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from pssh import __version__
from pssh.config import SETTINGS_FILE, PsshConfig, SettingsError, load_config
from pssh.loader import (
    USER_CONFIG,
    ConfigLoadError,
    HomeDirectoryError,
    load_inventory,
    resolve_home,
    resolve_path,
)
from pssh.runner import CommandTemplateError, ConnectionCommandError, connect
from pssh.selector import select_host
from pssh.selector.app import COLUMNS
from pssh.types import Inventory

app = typer.Typer(help="pssh - pick a host from your SSH config and connect to it")
console = Console()


def setup_logging(verbose: bool = False):
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    logging.getLogger("paramiko").setLevel(logging.WARNING)


@dataclass
class Options:
    """Options shared by every command."""

    settings: PsshConfig
    home: Path
    paths: list[str]
    command: str
    loop: bool


def config_paths(configured: list[str], extra: str, home: Path) -> list[str]:
    """Configured paths followed by extra, dropping repeats of the same file."""
    paths = []
    seen: set[Path] = set()
    for path in [*configured, extra]:
        resolved = resolve_path(path, home).absolute()
        if resolved in seen:
            continue
        seen.add(resolved)
        paths.append(path)
    return paths


def get_inventory(options: Options) -> Inventory:
    """Load the host inventory, exiting with an error if any file fails."""
    try:
        return load_inventory(options.paths, options.home, options.settings.ssh.optional)
    except ConfigLoadError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    ssh_config: str = typer.Option(USER_CONFIG, "--ssh-config", help="Path to ssh config file"),
    loop: bool | None = typer.Option(
        None, "--loop/--no-loop", help="Retry until the SSH connection succeeds"
    ),
    command: str | None = typer.Option(
        None, "--command", "-c", help="Command template, e.g. 'ssh {name}'"
    ),
    settings: str = typer.Option(
        SETTINGS_FILE, "--settings", envvar="PSSH_SETTINGS", help="Path to pssh settings file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Pick a host interactively and connect to it."""
    setup_logging(verbose)

    # version needs neither settings nor a home directory
    if ctx.invoked_subcommand == "version":
        return

    try:
        home = resolve_home()
    except HomeDirectoryError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    try:
        config = load_config(resolve_path(settings, home))
    except SettingsError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    options = Options(
        settings=config,
        home=home,
        paths=config_paths(config.ssh.configs, ssh_config, home),
        command=command or config.connect.command,
        loop=config.connect.loop if loop is None else loop,
    )
    ctx.obj = options

    if ctx.invoked_subcommand is not None:
        return

    inventory = get_inventory(options)
    host = select_host(
        inventory.hosts,
        table_height=config.ui.table_height,
        placeholder=config.ui.placeholder,
    )
    if host is None:
        raise typer.Exit(0)

    try:
        exit_code = connect(
            host,
            template=options.command,
            loop=options.loop,
            retry_delay=config.connect.retry_delay,
        )
    except (CommandTemplateError, ConnectionCommandError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        raise typer.Exit(130)

    raise typer.Exit(exit_code)


@app.command()
def version():
    """Display the version."""
    console.print(f"pssh version {__version__}")


@app.command("list")
def list_hosts(ctx: typer.Context):
    """List the configured hosts without the interactive picker."""
    inventory = get_inventory(ctx.obj)

    if not inventory.hosts:
        console.print("No hosts configured.")
        return

    table = Table()
    for title, _ in COLUMNS:
        table.add_column(title)
    for host in inventory.hosts:
        table.add_row(*(Text(cell) for cell in host.row()))
    console.print(table)


@app.command()
def show(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Host name or alias"),
):
    """Show every directive of a host's config block."""
    inventory = get_inventory(ctx.obj)

    host = inventory.find(name)
    if host is None:
        console.print(f"[red]Error:[/red] Host {escape(name)} not found.")
        raise typer.Exit(1)

    block = inventory.block_for(host)
    console.print(f"[bold]Host:[/bold] {escape(host.name)} {escape(host.aliases)}".rstrip())
    if block is not None and block.source is not None:
        console.print(f"[bold]Source:[/bold] {escape(str(block.source))}")
    if block is not None:
        for key, value in block.directives:
            console.print(f"  {key} {escape(value)}")


if __name__ == "__main__":
    app()
