"""
Loaded dashboard dataset.

A Dataset is the explicit context object for one load: the coerced records,
the descriptor table classified over all of them, and the parsed tree. It
replaces process-wide state so a reload builds a fresh Dataset instead of
patching stale tables.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from phylodash.core.classifier import classify_descriptors
from phylodash.core.colors import assign_colors
from phylodash.core.exceptions import EmptyTreeError, UnknownDescriptorError
from phylodash.core.newick import TreeNode, leaves, parse_newick
from phylodash.core.records import RecordTable, load_records
from phylodash.core.views import assign_radii, filter_records
from phylodash.models.config import DashboardConfig
from phylodash.models.descriptors import DescriptorInfo, Record

logger = logging.getLogger(__name__)


@dataclass
class Dataset:
    """Records, descriptor table and tree from one successful load.

    Attributes:
        table: Coerced metadata (all records, unfiltered).
        descriptor_info: Descriptor name to DescriptorInfo, computed once
            over the unfiltered records.
        tree: Parsed tree root.
        config: Configuration used for the load.
    """

    table: RecordTable
    descriptor_info: dict[str, DescriptorInfo]
    tree: TreeNode
    config: DashboardConfig = field(default_factory=DashboardConfig)

    @classmethod
    def from_texts(
        cls,
        csv_text: str,
        newick_text: str,
        config: DashboardConfig | None = None,
    ) -> Dataset:
        """
        Build a dataset from CSV and Newick text.

        The CSV is read and coerced before the tree text is checked and
        parsed; descriptors are classified last.

        Raises:
            EmptyCsvError: If the CSV has no data rows.
            EmptyTreeError: If the Newick text is empty.
            NewickFormatError: If the tree cannot be parsed.
        """
        config = config or DashboardConfig()

        table = load_records(
            csv_text,
            config.columns,
            missing_tokens=config.classifier.missing_tokens,
        )
        if not newick_text or not newick_text.strip():
            raise EmptyTreeError()

        tree = parse_newick(newick_text)
        descriptor_info = classify_descriptors(
            table.records, table.descriptors, config.classifier
        )

        dataset = cls(table=table, descriptor_info=descriptor_info, tree=tree, config=config)
        logger.info(
            "Loaded %d records, %d descriptors, %d leaves (%d joined to records)",
            len(table),
            len(table.descriptors),
            len(leaves(tree)),
            dataset.joined_leaf_count(),
        )
        return dataset

    @property
    def records(self) -> tuple[Record, ...]:
        return self.table.records

    @property
    def descriptors(self) -> tuple[str, ...]:
        return self.table.descriptors

    def info(self, descriptor: str) -> DescriptorInfo:
        """Descriptor info by name.

        Raises:
            UnknownDescriptorError: If the name is not a descriptor.
        """
        try:
            return self.descriptor_info[descriptor]
        except KeyError:
            raise UnknownDescriptorError(descriptor, list(self.descriptors)) from None

    def filtered(self, query: str | None = None) -> list[Record]:
        """Records matching a search query; the descriptor table is unchanged."""
        return filter_records(self.records, query)

    def joined_leaf_count(self) -> int:
        """Number of leaves whose name matches a record accession."""
        accessions = {r.accession for r in self.records if r.accession is not None}
        return sum(1 for leaf in leaves(self.tree) if leaf.name in accessions)

    def colour_tree(self, descriptor: str | None = None, query: str | None = None) -> TreeNode:
        """
        Colour the tree by a descriptor and set radial radii.

        Args:
            descriptor: Colour descriptor, None for neutral colouring.
            query: Optional search query restricting the joined records.

        Returns:
            The annotated tree root.

        Raises:
            UnknownDescriptorError: If the descriptor does not exist.
        """
        info = self.info(descriptor) if descriptor is not None else None
        assign_colors(
            self.tree,
            self.filtered(query),
            descriptor,
            info,
            self.config.colors,
        )
        assign_radii(self.tree, self.config.layout.radial_extent)
        return self.tree
