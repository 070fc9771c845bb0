"""
Phylodash: data layer for linked phylogeny and metadata dashboards.

Joins a metadata table (CSV) with a phylogenetic tree (Newick), infers the
statistical type and domain of every metadata column and colours tree
clades by shared categorical traits, producing everything a tree, chart
and presence-heatmap view need to render.
"""

__version__ = "0.1.0"
__author__ = "Phylodash Team"

from phylodash.core.dataset import Dataset
from phylodash.core.newick import parse_newick
from phylodash.core.session import DashboardSession, LoadFailure
from phylodash.models.descriptors import DescriptorInfo, DescriptorType, Record

__all__ = [
    "DashboardSession",
    "Dataset",
    "DescriptorInfo",
    "DescriptorType",
    "LoadFailure",
    "Record",
    "parse_newick",
    "__version__",
]
