"""
Dashboard load orchestration.

Core functions raise typed errors and never catch them. The session is the
one place that does: it logs the failure, reports it through a single
failure channel and keeps the previously loaded dataset on screen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from phylodash.core.dataset import Dataset
from phylodash.core.exceptions import CsvError, PhylodashError, TreeError
from phylodash.models.config import DashboardConfig

logger = logging.getLogger(__name__)

FailureKind = Literal["csv", "tree", "generic"]


@dataclass(frozen=True)
class LoadFailure:
    """User-facing description of a failed load."""

    kind: FailureKind
    message: str
    error: Exception

    @property
    def alert(self) -> str:
        return f"Failed to load data: {self.message}. Please check file format and details."


def classify_failure(error: Exception) -> FailureKind:
    if isinstance(error, CsvError):
        return "csv"
    if isinstance(error, TreeError):
        return "tree"
    return "generic"


class DashboardSession:
    """
    Holds the currently displayed dataset across reloads.

    Example:
        >>> session = DashboardSession()
        >>> outcome = session.load(csv_text, newick_text)
        >>> if isinstance(outcome, LoadFailure):
        ...     print(outcome.alert)
    """

    def __init__(self, config: DashboardConfig | None = None):
        self.config = config or DashboardConfig()
        self._dataset: Dataset | None = None

    @property
    def dataset(self) -> Dataset | None:
        """Last successfully loaded dataset."""
        return self._dataset

    @property
    def loaded(self) -> bool:
        return self._dataset is not None

    def load(self, csv_text: str, newick_text: str) -> Dataset | LoadFailure:
        """
        Load a new dataset, replacing the current one only on success.

        Returns:
            The new Dataset, or a LoadFailure when loading failed.
        """
        try:
            dataset = Dataset.from_texts(csv_text, newick_text, self.config)
        except PhylodashError as e:
            logger.error("Failed to load data: %s", e.message)
            return LoadFailure(kind=classify_failure(e), message=e.message, error=e)
        except (ValueError, TypeError) as e:
            logger.exception("Unexpected error while loading data")
            return LoadFailure(kind="generic", message=str(e), error=e)

        self._dataset = dataset
        return dataset
