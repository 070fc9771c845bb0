"""
Pydantic data models for phylodash.

Provides type-safe models for metadata records, descriptor classification
results and configuration.
"""

from phylodash.models.config import (
    ClassifierConfig,
    ColorConfig,
    ColumnConfig,
    DashboardConfig,
    LayoutConfig,
)
from phylodash.models.descriptors import DescriptorInfo, DescriptorType, Record

__all__ = [
    "ClassifierConfig",
    "ColorConfig",
    "ColumnConfig",
    "DashboardConfig",
    "DescriptorInfo",
    "DescriptorType",
    "LayoutConfig",
    "Record",
]
