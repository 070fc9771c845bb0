"""
Data command for filtering and summarising metadata records.

Provides subcommands:
- filter: Export records matching accession/pmid search tokens
- presence: Paper x descriptor data availability matrix
- pyramid: Back-to-back counts for two categorical descriptors
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from phylodash.cli.utils import (
    QuietConsole,
    configure_logging,
    fail,
    load_config,
    load_dataset,
)
from phylodash.core.exceptions import PhylodashError
from phylodash.core.views import export_csv, presence_matrix, pyramid_counts

app = typer.Typer(
    name="data",
    help="Filter, export and summarise metadata records",
    no_args_is_help=True,
)

console = Console()

CSV_OPTION = typer.Option(
    ...,
    "--csv",
    "-c",
    help="Metadata CSV with accession, pmid and descriptor columns",
    exists=True,
    dir_okay=False,
)
QUERY_OPTION = typer.Option(
    None,
    "--query",
    help="Comma-separated accession/pmid search tokens (case-insensitive)",
)
CONFIG_OPTION = typer.Option(
    None,
    "--config",
    help="YAML configuration file",
    exists=True,
    dir_okay=False,
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable verbose output")
QUIET_OPTION = typer.Option(False, "--quiet", "-q", help="Suppress progress output")


@app.command(name="filter")
def filter_command(
    csv: Path = CSV_OPTION,
    query: str | None = QUERY_OPTION,
    output: Path = typer.Option(..., "--output", "-o", help="Output CSV file"),
    config: Path | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
) -> None:
    """
    Export the records matching a search query.

    Example:

        phylodash data filter --csv metadata.csv --query "MN90,3201" -o filtered_sequences.csv
    """
    configure_logging(verbose)
    out = QuietConsole(console, quiet=quiet)
    dataset = load_dataset(csv, None, load_config(config, console), console)

    records = dataset.filtered(query)
    text = export_csv(
        records,
        dataset.descriptors,
        paper_id_column=dataset.table.paper_id_column or "pmid",
    )
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text)

    out.print(f"[bold]Records:[/bold] {len(records)} of {len(dataset.records)}")
    out.print(f"[bold]Output:[/bold] {output}")


@app.command(name="presence")
def presence(
    csv: Path = CSV_OPTION,
    query: str | None = QUERY_OPTION,
    output: Path = typer.Option(..., "--output", "-o", help="Output CSV file"),
    config: Path | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
) -> None:
    """
    Write the paper x descriptor presence matrix.

    A cell is 1 when any record of the paper has a value (not empty or NA)
    for the descriptor.
    """
    configure_logging(verbose)
    out = QuietConsole(console, quiet=quiet)
    dataset = load_dataset(csv, None, load_config(config, console), console)

    matrix = presence_matrix(dataset.filtered(query), dataset.descriptors)
    output.parent.mkdir(parents=True, exist_ok=True)
    matrix.to_frame().write_csv(output)

    out.print(
        f"[bold]Matrix:[/bold] {len(matrix.descriptors)} descriptors x "
        f"{len(matrix.paper_ids)} papers"
    )
    out.print(f"[bold]Output:[/bold] {output}")


@app.command(name="pyramid")
def pyramid(
    csv: Path = CSV_OPTION,
    x: str = typer.Option(..., "--x", help="Categorical descriptor split left/right"),
    y: str = typer.Option(..., "--y", help="Categorical descriptor on the vertical axis"),
    query: str | None = QUERY_OPTION,
    config: Path | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """
    Print back-to-back counts for the first two categories of X.
    """
    configure_logging(verbose)
    dataset = load_dataset(csv, None, load_config(config, console), console)

    try:
        counts = pyramid_counts(dataset.filtered(query), x, y, dataset.descriptor_info)
    except PhylodashError as e:
        fail(console, e)

    table = Table(title=f"{x} by {y}")
    table.add_column(str(counts.left_label or "-"), justify="right")
    table.add_column(y, justify="center", style="bold")
    table.add_column(str(counts.right_label or "-"), justify="right")
    for category, left, right in counts.rows:
        table.add_row(str(left), category, str(right))
    console.print(table)
