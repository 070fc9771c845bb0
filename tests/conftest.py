"""
Shared pytest fixtures for phylodash tests.

Provides reusable metadata tables, Newick trees and temporary input files
for unit and integration testing.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from phylodash.core.dataset import Dataset
from phylodash.core.records import coerce_row
from phylodash.models.descriptors import Record


# =============================================================================
# Metadata Fixtures
# =============================================================================


@pytest.fixture
def metadata_csv() -> str:
    """Small metadata table: 8 sequences from 3 papers.

    - genotype: categorical (GI/GII)
    - host: categorical with one NA
    - length_kb: numerical (8 distinct values)
    - severity: numeric codes 1-3, categorical by cardinality
    """
    return (
        "accession,pmid,genotype,host,length_kb,severity\n"
        "A1,1001,GII,human,7.5,1\n"
        "A2,1001,GII,human,7.6,2\n"
        "A3,1001,GII,NA,7.7,2\n"
        "B1,2002,GI,pig,7.1,3\n"
        "B2,2002,GI,pig,7.2,1\n"
        "C1,3003,GII,human,7.9,\n"
        "C2,3003,GI,oyster,8.1,3\n"
        "C3,3003,GII,human,8.3,1\n"
    )


@pytest.fixture
def metadata_newick() -> str:
    """Tree over the metadata accessions plus one unmatched leaf (X9).

    Clade (A1,A2,A3) is uniformly GII; (B1,B2) is uniformly GI;
    (C1,C2,C3) is mixed.
    """
    return (
        "(((A1:0.1,A2:0.2,A3:0.1)cladeA:0.5,(B1:0.3,B2:0.3)cladeB:0.4)ab:0.1,"
        "(C1:0.2,C2:0.2,C3:0.1)cladeC:0.6,X9:1.0)root;"
    )


@pytest.fixture
def dataset(metadata_csv: str, metadata_newick: str) -> Dataset:
    """Dataset loaded from the metadata fixtures."""
    return Dataset.from_texts(metadata_csv, metadata_newick)


@pytest.fixture
def csv_file(tmp_path: Path, metadata_csv: str) -> Path:
    path = tmp_path / "metadata.csv"
    path.write_text(metadata_csv)
    return path


@pytest.fixture
def tree_file(tmp_path: Path, metadata_newick: str) -> Path:
    path = tmp_path / "tree.nwk"
    path.write_text(metadata_newick + "\n")
    return path


# =============================================================================
# Record Helpers
# =============================================================================


def make_record(accession: str, paper_id: str = "1", **descriptors: str) -> Record:
    """Build a coerced Record from raw string descriptor values."""
    raw = {"accession": accession, "pmid": paper_id, **descriptors}
    return coerce_row(raw, {"accession", "pmid"})


@pytest.fixture
def record_factory():
    """Factory fixture wrapping make_record."""
    return make_record
