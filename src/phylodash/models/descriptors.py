"""
Data models for metadata records and descriptor classification.

A Record is one row of the metadata CSV with its descriptor values already
coerced to numbers or strings. A DescriptorInfo is the inferred statistical
type and value domain of one descriptor column.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import BaseModel, Field

# Coerced descriptor value; None marks missing data ("", "NA")
DescriptorValue = Union[str, int, float, None]


class DescriptorType(str, Enum):
    """Statistical type of a descriptor column."""

    NUMERICAL = "numerical"
    CATEGORICAL = "categorical"


class Record(BaseModel):
    """Single metadata row joined to the tree by accession.

    Attributes:
        accession: Identifier matching a tree leaf name (None if the column is absent)
        paper_id: Source publication identifier grouping records
        descriptors: Column name to coerced value, in CSV header order
    """

    accession: str | None = Field(default=None, description="Tree leaf identifier")
    paper_id: str | None = Field(default=None, description="Publication identifier (pmid)")
    descriptors: dict[str, DescriptorValue] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def value(self, descriptor: str) -> DescriptorValue:
        """Coerced value for a descriptor, None when missing or unknown."""
        return self.descriptors.get(descriptor)


class DescriptorInfo(BaseModel):
    """Inferred type and domain of one descriptor column.

    For numerical descriptors the domain is ``(min, max)`` over the values
    that parse as numbers. For categorical descriptors it is the distinct
    observed values as strings, sorted lexicographically, so "10" sorts
    before "2".
    """

    name: str = Field(description="Descriptor column name")
    type: DescriptorType
    domain: tuple[float, float] | tuple[str, ...] = Field(default=())

    model_config = {"frozen": True}

    @property
    def is_numerical(self) -> bool:
        return self.type == DescriptorType.NUMERICAL

    @property
    def is_categorical(self) -> bool:
        return self.type == DescriptorType.CATEGORICAL

    @property
    def categories(self) -> tuple[str, ...]:
        """Categorical domain, empty for numerical descriptors."""
        if self.is_categorical:
            return tuple(str(v) for v in self.domain)
        return ()

    @property
    def extent(self) -> tuple[float, float] | None:
        """Numerical (min, max), None for categorical descriptors."""
        if self.is_numerical:
            low, high = self.domain
            return float(low), float(high)
        return None
