"""
Bottom-up colour aggregation over the tree.

Leaves take the colour of their metadata record's category for the selected
descriptor. Internal nodes take their children's colour only when every
child has exactly the same colour, so a coloured clade means "this whole
clade shares trait X"; any disagreement gives the neutral colour.

Colours are keyed on a hash of the category string rather than its position
in the domain, so the same category keeps its colour across filtered views.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from phylodash.core.classifier import category_label
from phylodash.core.newick import Leaf, TreeNode, iter_postorder, iter_preorder
from phylodash.core.records import is_missing
from phylodash.models.config import ColorConfig
from phylodash.models.descriptors import DescriptorInfo, DescriptorValue, Record

logger = logging.getLogger(__name__)


def category_hash(value: object) -> int:
    """Sum of the code points of a value's string form (0 for empty)."""
    if value is None:
        return 0
    return sum(ord(char) for char in category_label(value))


class CategoricalColorScale:
    """
    Stable mapping from category value to palette colour.

    Example:
        >>> scale = CategoricalColorScale()
        >>> scale("B") == scale("B")
        True
    """

    def __init__(self, config: ColorConfig | None = None):
        self._config = config or ColorConfig()

    @property
    def neutral(self) -> str:
        return self._config.neutral_color

    @property
    def palette(self) -> tuple[str, ...]:
        return self._config.palette

    def __call__(self, value: DescriptorValue) -> str:
        if is_missing(value):
            return self.neutral
        palette = self._config.palette
        return palette[category_hash(value) % len(palette)]

    def legend(self, info: DescriptorInfo) -> list[tuple[str, str]]:
        """(category, colour) pairs in domain order."""
        return [(category, self(category)) for category in info.categories]


def color_for_value(value: DescriptorValue, config: ColorConfig | None = None) -> str:
    """Colour of a single value, as used by chart points and legends."""
    return CategoricalColorScale(config)(value)


def _paint_neutral(root: TreeNode, color: str) -> None:
    for node in iter_preorder(root):
        node.color = color


def assign_colors(
    root: TreeNode,
    records: Sequence[Record],
    descriptor: str | None,
    info: DescriptorInfo | None,
    config: ColorConfig | None = None,
) -> None:
    """
    Annotate every node of the tree with a colour, in place.

    Single writer, single pass: call on a freshly parsed tree, not
    concurrently with readers.

    Args:
        root: Tree root.
        records: Records to join by accession (typically the filtered view).
        descriptor: Selected colour descriptor, None for no colouring.
        info: Classification of ``descriptor``.
        config: Palette and neutral colour.
    """
    scale = CategoricalColorScale(config)

    if descriptor is None or info is None or not info.is_categorical:
        _paint_neutral(root, scale.neutral)
        return

    # first record wins for duplicated accessions
    by_accession: dict[str, Record] = {}
    for record in records:
        if record.accession is not None:
            by_accession.setdefault(record.accession, record)

    unmatched = 0
    for node in iter_postorder(root):
        if isinstance(node, Leaf):
            record = by_accession.get(node.name)
            if record is None:
                unmatched += 1
                node.color = scale.neutral
            else:
                node.color = scale(record.value(descriptor))
            continue

        first = node.children[0].color
        shared = all(child.color == first for child in node.children)
        node.color = first if shared else scale.neutral

    if unmatched:
        logger.debug("%d leaves have no matching record for %s", unmatched, descriptor)
