"""
Shared CLI utilities for phylodash commands.

Provides common functionality used across CLI modules.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from phylodash.core.dataset import Dataset
from phylodash.core.exceptions import PhylodashError
from phylodash.models.config import DashboardConfig


@contextmanager
def spinner_progress(
    description: str,
    console: Console | None = None,
    quiet: bool = False,
) -> Generator[Progress, None, None]:
    """Context manager for spinner-style progress display.

    The spinner is suppressed when quiet mode is enabled.

    Args:
        description: Task description to display.
        console: Rich Console instance. If None and not quiet, creates one.
        quiet: If True, suppress the progress display entirely.

    Yields:
        Progress instance (even when quiet, for API consistency).
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console if not quiet else None,
        disable=quiet,
    ) as progress:
        progress.add_task(description=description, total=None)
        yield progress


class QuietConsole:
    """Console wrapper that suppresses output in quiet mode.

    Wraps a Rich Console and conditionally suppresses print output when
    quiet mode is enabled. All other console methods are delegated to the
    wrapped instance.
    """

    def __init__(self, console: Console, quiet: bool = False):
        self._console = console
        self._quiet = quiet

    @property
    def console(self) -> Console:
        """The wrapped Console, for output that ignores quiet mode."""
        return self._console

    def print(self, *args: Any, **kwargs: Any) -> None:
        if not self._quiet:
            self._console.print(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._console, name)


def configure_logging(verbose: bool) -> None:
    """Send DEBUG logs to stderr when --verbose is given."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


def fail(console: Console, error: PhylodashError | str) -> NoReturn:
    """Print an error (with its suggestion) and exit with code 1."""
    if isinstance(error, PhylodashError):
        console.print(f"[red]Error: {error.message}[/red]")
        if error.suggestion:
            console.print(f"[dim]{error.suggestion}[/dim]")
    else:
        console.print(f"[red]Error: {error}[/red]")
    raise typer.Exit(code=1)


def load_config(path: Path | None, console: Console) -> DashboardConfig:
    """Load a YAML config, or the defaults when no path is given."""
    if path is None:
        return DashboardConfig()
    try:
        return DashboardConfig.from_yaml(path)
    except PhylodashError as e:
        fail(console, e)


def load_dataset(
    csv_path: Path,
    tree_path: Path | None,
    config: DashboardConfig,
    console: Console,
) -> Dataset:
    """
    Read input files and build a Dataset, exiting on load errors.

    When no tree file is given a single-leaf placeholder tree is used, so
    commands that only need the metadata table still work.
    """
    csv_text = csv_path.read_text(encoding="utf-8")
    newick_text = tree_path.read_text(encoding="utf-8") if tree_path else "metadata_only;"
    try:
        return Dataset.from_texts(csv_text, newick_text, config)
    except PhylodashError as e:
        fail(console, e)
