"""
Tree command for colouring phylogenetic trees.

Provides subcommands:
- colour: Colour tree clades by a categorical descriptor
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from phylodash.cli.utils import (
    QuietConsole,
    configure_logging,
    fail,
    load_config,
    load_dataset,
    spinner_progress,
)
from phylodash.core.colors import CategoricalColorScale
from phylodash.core.exceptions import PhylodashError
from phylodash.core.newick import leaf_count, to_json

app = typer.Typer(
    name="tree",
    help="Colour phylogenetic trees by metadata",
    no_args_is_help=True,
)

console = Console()


@app.command(name="colour")
def colour(
    csv: Path = typer.Option(
        ...,
        "--csv",
        "-c",
        help="Metadata CSV with accession, pmid and descriptor columns",
        exists=True,
        dir_okay=False,
    ),
    tree: Path = typer.Option(
        ...,
        "--tree",
        "-t",
        help="Newick tree file",
        exists=True,
        dir_okay=False,
    ),
    descriptor: str | None = typer.Option(
        None,
        "--colour",
        "--color",
        help="Categorical descriptor to colour by (default: no colouring)",
    ),
    query: str | None = typer.Option(
        None,
        "--query",
        help="Comma-separated accession/pmid search tokens",
    ),
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Output JSON hierarchy",
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
    Colour a tree and write it as a JSON hierarchy.

    Leaves take the colour of their record's category; an internal node is
    coloured only when all of its children share the same colour. Numerical
    descriptors leave the whole tree neutral.

    Examples:

        # Colour clades by genotype
        phylodash tree colour --csv metadata.csv --tree tree.nwk --colour genotype -o tree.json

        # Restrict the joined records to two papers
        phylodash tree colour -c metadata.csv -t tree.nwk --colour host --query 3201,3345 -o tree.json
    """
    configure_logging(verbose)
    out = QuietConsole(console, quiet=quiet)
    dashboard_config = load_config(config, console)

    out.print("\n[bold blue]Phylodash Tree Colouring[/bold blue]\n")

    with spinner_progress(f"Loading {tree.name} and {csv.name}...", console, quiet):
        dataset = load_dataset(csv, tree, dashboard_config, console)

    out.print(f"[bold]Leaves:[/bold] {leaf_count(dataset.tree)}")
    out.print(f"[bold]Joined to records:[/bold] {dataset.joined_leaf_count()}")

    try:
        root = dataset.colour_tree(descriptor, query)
    except PhylodashError as e:
        fail(console, e)

    legend: list[dict[str, str]] = []
    if descriptor is not None:
        info = dataset.info(descriptor)
        if info.is_categorical:
            scale = CategoricalColorScale(dashboard_config.colors)
            legend = [
                {"category": category, "color": color}
                for category, color in scale.legend(info)
            ]
        else:
            out.print(
                f"[yellow]Descriptor '{descriptor}' is {info.type.value}; "
                "tree left uncoloured[/yellow]"
            )

    output.parent.mkdir(parents=True, exist_ok=True)
    # tree text comes from to_json, which handles any depth
    text = (
        f'{{"tree": {to_json(root)}, "descriptor": {json.dumps(descriptor)}, '
        f'"legend": {json.dumps(legend, indent=2)}}}\n'
    )
    output.write_text(text)

    out.print("\n[bold green]Tree coloured successfully![/bold green]")
    out.print(f"[bold]Output:[/bold] {output}")
    out.print()
