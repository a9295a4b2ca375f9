#!/usr/bin/env python3
"""
psprovisioner - Command Line Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Reports what a provisioning run would do

Provisioning itself is driven by a host orchestrator through
Provisioner.prepare() / provision() / cancel(); this CLI only checks and
previews configuration. All logic is in the modules.
"""

import json
import logging
import sys
from typing import BinaryIO, Dict, List

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from psprovisioner.config.provider import EnvConfigProvider
from psprovisioner.errors import ProvisionerError
from psprovisioner.logging_config import configure_logging
from psprovisioner.modules.command import POWERSHELL
from psprovisioner.modules.config import get_config_schema, load_config
from psprovisioner.modules.encoder import powershell_decode
from psprovisioner.modules.executor import Provisioner

logger = logging.getLogger("psprovisioner.main")

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


class DryRunChannel:
    """Channel that keeps uploads in memory and refuses to start commands."""

    def __init__(self):
        self.uploads: Dict[str, bytes] = {}

    def upload(self, remote_path: str, data: BinaryIO) -> None:
        self.uploads[remote_path] = data.read()

    def start(self, command: str):
        raise ProvisionerError("dry run: commands are never started")


def _prepare(config_paths: List[str]) -> Provisioner:
    raws = [load_config(path) for path in config_paths]
    provisioner = Provisioner(config_provider=EnvConfigProvider())
    provisioner.prepare(*raws)
    return provisioner


@click.group()
@click.option("--log-level", "log_level", default=None, help="Overrides LOG_LEVEL")
def cli(log_level):
    runtime = EnvConfigProvider().get_runtime_config()
    configure_logging((log_level or runtime.log_level).upper())


@cli.command()
@click.argument("config_paths", nargs=-1, required=True, type=click.Path())
def validate(config_paths):
    """Validate one or more YAML configs (merged in order)."""
    try:
        request = _prepare(list(config_paths)).request
    except ProvisionerError as e:
        failures = getattr(e, "failures", None)
        if failures:
            for failure in failures:
                err_console.print(f"[red]*[/red] {escape(str(failure))}")
        else:
            err_console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    summary = (
        f"{len(request.scripts) or 1} script(s), remote path {request.remote_path}, "
        f"elevated={request.elevated}, valid exit codes {list(request.valid_exit_codes)}"
    )
    console.print(f"[green]OK[/green]: {escape(summary)}")


@cli.command()
@click.argument("config_paths", nargs=-1, required=True, type=click.Path())
def render(config_paths):
    """Show the command line each script would be started with."""
    try:
        channel = DryRunChannel()
        command = _prepare(list(config_paths)).command_renderer(channel).render()
    except ProvisionerError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    click.echo(command)

    prefix = f"{POWERSHELL} -encodedCommand "
    if command.startswith(prefix):
        click.echo("")
        click.echo(powershell_decode(command[len(prefix):]))

    for path, data in channel.uploads.items():
        click.echo("")
        click.echo(f"# would upload {path} ({len(data)} bytes)")


@cli.command()
@click.option("--table", "as_table", is_flag=True, help="Show a table instead of JSON")
def schema(as_table):
    """Print every recognized config key with its default."""
    config_schema = get_config_schema()
    if not as_table:
        click.echo(json.dumps(config_schema, indent=2))
        return

    table = Table(title="Provisioner Configuration")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Default", style="yellow")
    table.add_column("Description")

    for key, spec in config_schema.items():
        table.add_row(key, escape(json.dumps(spec["default"])), escape(spec["description"]))

    console.print(table)


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
