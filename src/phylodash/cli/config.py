"""
Config command for managing configuration files.

Provides subcommands:
- init: Write the default configuration as YAML
- show: Print the effective configuration
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.syntax import Syntax

from phylodash.cli.utils import load_config
from phylodash.models.config import DashboardConfig

app = typer.Typer(
    name="config",
    help="Create and inspect configuration files",
    no_args_is_help=True,
)

console = Console()


@app.command(name="init")
def init(
    output: Path = typer.Option(
        Path("phylodash.yaml"),
        "--output",
        "-o",
        help="Output YAML file",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """Write the default configuration."""
    if output.exists() and not force:
        console.print(f"[red]Error: {output} already exists (use --force to overwrite)[/red]")
        raise typer.Exit(code=1)

    output.parent.mkdir(parents=True, exist_ok=True)
    DashboardConfig().to_yaml(output)
    console.print(f"[bold]Output:[/bold] {output}")


@app.command(name="show")
def show(
    config: Path | None = typer.Option(
        None,
        "--config",
        help="YAML configuration file (default: built-in defaults)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Print the effective configuration."""
    effective = load_config(config, console)
    console.print(Syntax(effective.to_yaml_str(), "yaml"))
