"""
Main CLI entry point for phylodash.

Provides subcommands for each data product of the dashboard:
- descriptors: Classify metadata columns (numerical vs. categorical)
- tree: Colour a Newick tree by a categorical descriptor
- data: Filter, export and summarise metadata records
- config: Write the default configuration file
"""

from __future__ import annotations

import typer
from rich import print as rprint
from rich.console import Console

from phylodash import __version__

app = typer.Typer(
    name="phylodash",
    help="Join phylogenetic trees with metadata tables for linked dashboards",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        rprint(f"phylodash version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Phylodash: data layer for linked phylogeny and metadata dashboards.

    Reads a metadata CSV (accession, pmid and descriptor columns) and a
    Newick tree, classifies each descriptor and colours tree clades that
    share a categorical trait.
    """


# Import subcommands
from phylodash.cli import config as config_cmd  # Alias to avoid shadowing the config models
from phylodash.cli import data, descriptors, tree

# Register subcommands
app.add_typer(descriptors.app, name="descriptors")
app.add_typer(tree.app, name="tree")
app.add_typer(data.app, name="data")
app.add_typer(config_cmd.app, name="config")


if __name__ == "__main__":
    app()
