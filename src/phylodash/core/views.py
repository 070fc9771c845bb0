"""
Data preparation for the dashboard views.

The SVG drawing itself happens in the browser; these helpers compute what
each panel needs from the coerced records and the descriptor table:

- filter_records: search-box filtering by accession or paper id
- presence_matrix: paper x descriptor data availability heatmap
- pyramid_counts: back-to-back bar counts for two categorical descriptors
- scatter_points: records plottable on a set of descriptors
- assign_radii: branch-length radii for the radial tree layout
- export_csv: the filtered table as CSV text
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import numpy as np
import polars as pl

from phylodash.core.classifier import category_label
from phylodash.core.exceptions import DescriptorTypeError, UnknownDescriptorError
from phylodash.core.newick import TreeNode, iter_preorder
from phylodash.core.records import is_missing
from phylodash.models.descriptors import DescriptorInfo, Record

logger = logging.getLogger(__name__)


def search_tokens(query: str | None) -> list[str]:
    """Split a comma-separated query into upper-cased non-empty tokens."""
    if not query:
        return []
    return [token.strip().upper() for token in query.split(",") if token.strip()]


def filter_records(records: Sequence[Record], query: str | None) -> list[Record]:
    """
    Records whose accession or paper id contains any query token.

    Matching is case-insensitive substring matching. An empty query keeps
    every record. Filtering never touches the descriptor table.
    """
    tokens = search_tokens(query)
    if not tokens:
        return list(records)

    def matches(record: Record) -> bool:
        accession = (record.accession or "").upper()
        paper_id = (record.paper_id or "").upper()
        return any(token in accession or token in paper_id for token in tokens)

    selected = [r for r in records if matches(r)]
    logger.debug("Filter %r kept %d of %d records", query, len(selected), len(records))
    return selected


@dataclass
class PresenceMatrix:
    """Descriptor availability per paper.

    ``values[i, j]`` is 1 when any record of paper ``paper_ids[j]`` has a
    non-missing value for descriptor ``descriptors[i]``.
    """

    descriptors: list[str]
    paper_ids: list[str]
    values: np.ndarray

    def is_present(self, descriptor: str, paper_id: str) -> bool:
        i = self.descriptors.index(descriptor)
        j = self.paper_ids.index(paper_id)
        return bool(self.values[i, j])

    def to_frame(self) -> pl.DataFrame:
        """Wide DataFrame: one row per descriptor, one column per paper.

        The label column is "descriptor", suffixed with "_" until it no
        longer collides with a paper id.
        """
        label = "descriptor"
        while label in self.paper_ids:
            label += "_"
        data: dict[str, list] = {label: list(self.descriptors)}
        for j, paper_id in enumerate(self.paper_ids):
            data[paper_id] = self.values[:, j].astype(int).tolist()
        return pl.DataFrame(data)


def presence_matrix(records: Sequence[Record], descriptors: Sequence[str]) -> PresenceMatrix:
    """
    Build the paper x descriptor presence matrix.

    Papers appear in first-seen order; records without a paper id are
    grouped under an empty label.
    """
    paper_ids: list[str] = list(dict.fromkeys(r.paper_id or "" for r in records))
    column = {paper_id: j for j, paper_id in enumerate(paper_ids)}
    values = np.zeros((len(descriptors), len(paper_ids)), dtype=np.int8)

    for record in records:
        j = column[record.paper_id or ""]
        for i, descriptor in enumerate(descriptors):
            if not is_missing(record.value(descriptor)):
                values[i, j] = 1

    return PresenceMatrix(descriptors=list(descriptors), paper_ids=paper_ids, values=values)


@dataclass
class PyramidCounts:
    """Back-to-back counts for the first two categories of the X descriptor."""

    left_label: str | None
    right_label: str | None
    rows: list[tuple[str, int, int]]  # (y category, left count, right count)
    max_count: int


def _require_categorical(info: DescriptorInfo) -> None:
    if not info.is_categorical:
        raise DescriptorTypeError(info.name, info.type.value, "categorical")


def pyramid_counts(
    records: Sequence[Record],
    x: str,
    y: str,
    table: Mapping[str, DescriptorInfo],
) -> PyramidCounts:
    """
    Count records per Y category for the first two X categories.

    Raises:
        UnknownDescriptorError: If x or y is not in the table.
        DescriptorTypeError: If x or y is not categorical.
    """
    for name in (x, y):
        if name not in table:
            raise UnknownDescriptorError(name, list(table))
    x_info, y_info = table[x], table[y]
    _require_categorical(x_info)
    _require_categorical(y_info)

    counts = Counter(
        (category_label(r.value(x)), category_label(r.value(y)))
        for r in records
        if not is_missing(r.value(x)) and not is_missing(r.value(y))
    )

    x_categories = x_info.categories
    left = x_categories[0] if len(x_categories) > 0 else None
    right = x_categories[1] if len(x_categories) > 1 else None

    rows = [
        (y_cat, counts.get((left, y_cat), 0), counts.get((right, y_cat), 0))
        for y_cat in y_info.categories
    ]
    max_count = max((max(a, b) for _, a, b in rows), default=0)
    return PyramidCounts(left_label=left, right_label=right, rows=rows, max_count=max_count)


def scatter_points(records: Sequence[Record], *descriptors: str) -> list[Record]:
    """Records with a non-missing value for every given descriptor."""
    return [
        r for r in records
        if all(not is_missing(r.value(d)) for d in descriptors)
    ]


def assign_radii(root: TreeNode, extent: float = 1.0) -> None:
    """
    Set ``radius`` on every node for the radial layout, in place.

    radius = parent radius + branch_length * (extent / longest branch).
    When every branch length is 0 all radii are 0.
    """
    max_length = max((node.branch_length for node in iter_preorder(root)), default=0.0)
    scale = extent / max_length if max_length > 0 else 0.0

    root.radius = root.branch_length * scale
    for node in iter_preorder(root):
        for child in node.children:
            child.radius = node.radius + child.branch_length * scale


def _cell(value: object) -> str | None:
    if is_missing(value):
        return None
    return category_label(value)


def export_csv(
    records: Sequence[Record],
    descriptors: Sequence[str],
    paper_id_column: str = "pmid",
) -> str:
    """
    Render records as CSV text.

    Header is ``accession, <paper id column>, descriptors...``; missing
    values are written as empty cells.
    """
    data: dict[str, list[str | None]] = {
        "accession": [r.accession for r in records],
        paper_id_column: [r.paper_id for r in records],
    }
    for descriptor in descriptors:
        data[descriptor] = [_cell(r.value(descriptor)) for r in records]

    schema = {name: pl.Utf8 for name in data}
    return pl.DataFrame(data, schema=schema).write_csv()
