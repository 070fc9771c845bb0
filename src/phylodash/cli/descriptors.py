"""
Descriptors command for classifying metadata columns.

Provides subcommands:
- classify: Infer type and domain of every descriptor column
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from phylodash.cli.utils import (
    QuietConsole,
    configure_logging,
    load_config,
    load_dataset,
    spinner_progress,
)
from phylodash.models.descriptors import DescriptorInfo

app = typer.Typer(
    name="descriptors",
    help="Classify metadata descriptor columns",
    no_args_is_help=True,
)

console = Console()

MAX_DOMAIN_PREVIEW = 8


def _domain_preview(info: DescriptorInfo) -> str:
    if info.is_numerical:
        low, high = info.extent
        return f"{low:g} - {high:g}"
    categories = list(info.categories)
    if not categories:
        return "[dim](no data)[/dim]"
    preview = ", ".join(categories[:MAX_DOMAIN_PREVIEW])
    if len(categories) > MAX_DOMAIN_PREVIEW:
        preview += f", ... (+{len(categories) - MAX_DOMAIN_PREVIEW})"
    return preview


@app.command(name="classify")
def classify(
    csv: Path = typer.Option(
        ...,
        "--csv",
        "-c",
        help="Metadata CSV with accession, pmid and descriptor columns",
        exists=True,
        dir_okay=False,
    ),
    json_output: Path | None = typer.Option(
        None,
        "--json",
        "-j",
        help="Write the descriptor table as JSON",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Classify descriptor columns as numerical or categorical.

    A column is numerical when more than 80% of its non-missing values are
    numbers and it has more than 6 distinct values; everything else is
    categorical.

    Examples:

        # Show the descriptor table
        phylodash descriptors classify --csv metadata.csv

        # Save it for the dashboard
        phylodash descriptors classify --csv metadata.csv --json descriptors.json
    """
    configure_logging(verbose)
    out = QuietConsole(console, quiet=quiet)
    dashboard_config = load_config(config, console)

    with spinner_progress(f"Classifying descriptors in {csv.name}...", console, quiet):
        dataset = load_dataset(csv, None, dashboard_config, console)

    table = Table(title=f"Descriptors ({len(dataset.records)} records)")
    table.add_column("Descriptor", style="bold")
    table.add_column("Type")
    table.add_column("Domain")
    for name, info in dataset.descriptor_info.items():
        colour = "cyan" if info.is_numerical else "magenta"
        table.add_row(name, f"[{colour}]{info.type.value}[/{colour}]", _domain_preview(info))
    out.print(table)

    if json_output is not None:
        payload = {
            name: info.model_dump(mode="json", exclude={"name"})
            for name, info in dataset.descriptor_info.items()
        }
        json_output.parent.mkdir(parents=True, exist_ok=True)
        json_output.write_text(json.dumps(payload, indent=2) + "\n")
        out.print(f"\n[bold]Output:[/bold] {json_output}")
